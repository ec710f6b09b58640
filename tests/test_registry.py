"""Tests for CT log key resolution."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from sigtrust.config import TrustConfig
from sigtrust.ct.advisory import AdvisoryKind
from sigtrust.ct.registry import LogKeyRegistry
from sigtrust.distribution.client import StatusKind, UsageKind
from sigtrust.exceptions import (
    ConfigError,
    ParseError,
    SourceUnavailableError,
    TrustNotFoundError,
    UnsupportedKeyTypeError,
)

from factories import CountingFactory, FakeLog, FakeTrustClient, spki, target, write_repository


def _remote(tmp_path, *targets, error=None):
    client = FakeTrustClient({UsageKind.CTFE: list(targets)}, error=error)
    return TrustConfig(tuf_root=tmp_path), CountingFactory(client), client


class TestOverrideKey:
    def test_pem_key(self, tmp_path, ct_log):
        path = tmp_path / "ctfe.pub"
        path.write_bytes(ct_log.public_pem)
        registry = LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path))

        assert list(registry) == [ct_log.log_id]
        assert registry.get(ct_log.log_id).status is StatusKind.ACTIVE
        assert [a.kind for a in registry.advisories] == [AdvisoryKind.NON_STANDARD_LOG_KEY]
        assert str(path) in registry.advisories[0].message

    def test_der_key(self, tmp_path, ct_log):
        path = tmp_path / "ctfe.der"
        path.write_bytes(spki(ct_log.public_key))
        registry = LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path))
        assert ct_log.log_id in registry

    def test_rsa_override_accepted(self, tmp_path):
        log = FakeLog(rsa.generate_private_key(public_exponent=65537, key_size=2048))
        path = tmp_path / "ctfe.pub"
        path.write_bytes(log.public_key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1
        ))
        registry = LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path))
        assert log.log_id in registry

    def test_override_skips_remote(self, tmp_path, ct_log):
        path = tmp_path / "ctfe.pub"
        path.write_bytes(ct_log.public_pem)
        factory = CountingFactory(FakeTrustClient())
        LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path), factory)
        assert factory.calls == 0

    def test_missing_file(self, tmp_path, caplog):
        config = TrustConfig(ct_log_public_key_file=tmp_path / "missing.pub")
        with pytest.raises(ConfigError):
            LogKeyRegistry.build(config)
        assert "non-standard public key" in caplog.text

    def test_unsupported_override_algorithm(self, tmp_path):
        key = dsa.generate_private_key(key_size=1024).public_key()
        path = tmp_path / "ctfe.pub"
        path.write_bytes(spki(key))
        with pytest.raises(UnsupportedKeyTypeError):
            LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path))

    def test_garbage_file(self, tmp_path):
        path = tmp_path / "ctfe.pub"
        path.write_bytes(b"definitely not a key")
        with pytest.raises(ParseError, match="SIGSTORE_CT_LOG_PUBLIC_KEY_FILE"):
            LogKeyRegistry.build(TrustConfig(ct_log_public_key_file=path))


class TestRemoteKeys:
    def test_keys_keep_status(self, tmp_path, ct_log):
        old = FakeLog()
        config, factory, client = _remote(
            tmp_path,
            target("ctfe.pub", ct_log.public_pem),
            target("ctfe_2021.pub", old.public_pem, StatusKind.EXPIRED),
        )
        registry = LogKeyRegistry.build(config, factory, timeout=1.5)

        assert len(registry) == 2
        assert registry.get(ct_log.log_id).status is StatusKind.ACTIVE
        assert registry.get(old.log_id).status is StatusKind.EXPIRED
        assert registry.advisories == []
        assert client.calls == [(UsageKind.CTFE, ["ctfe.pub"])]
        assert factory.timeouts == [1.5]
        assert client.closed

    def test_rsa_key_rejected(self, tmp_path):
        log = FakeLog(rsa.generate_private_key(public_exponent=65537, key_size=2048))
        config, factory, _ = _remote(tmp_path, target("ctfe.pub", log.public_pem))
        with pytest.raises(UnsupportedKeyTypeError, match="elliptic-curve"):
            LogKeyRegistry.build(config, factory)

    def test_unparsable_key(self, tmp_path):
        config, factory, _ = _remote(tmp_path, target("ctfe.pub", b"garbage"))
        with pytest.raises(ParseError, match="ctfe.pub"):
            LogKeyRegistry.build(config, factory)

    def test_no_keys(self, tmp_path):
        config, factory, _ = _remote(tmp_path)
        with pytest.raises(TrustNotFoundError, match="none of the CT log keys"):
            LogKeyRegistry.build(config, factory)

    def test_query_failure_releases_client(self, tmp_path):
        config, factory, client = _remote(tmp_path, error=SourceUnavailableError("offline"))
        with pytest.raises(SourceUnavailableError):
            LogKeyRegistry.build(config, factory)
        assert client.closed

    def test_unexpected_client_error_wrapped(self, tmp_path):
        config, factory, client = _remote(tmp_path, error=ValueError("bad frame"))
        with pytest.raises(SourceUnavailableError, match="bad frame"):
            LogKeyRegistry.build(config, factory)
        assert client.closed

    def test_local_repository_fallback_name(self, tmp_path, ct_log):
        repo = write_repository(tmp_path, {"ctfe.pub": (ct_log.public_pem, None, None)})
        registry = LogKeyRegistry.build(TrustConfig(tuf_root=repo))
        assert registry.get(ct_log.log_id).status is StatusKind.ACTIVE
