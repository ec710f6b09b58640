"""Tests for SCT records, add-chain decoding and signature checks."""

import base64
import hashlib
import json
import struct
from datetime import datetime, timezone

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from sigtrust.ct.sct import (
    AddChainResponse,
    LogID,
    SCTRecord,
    decode_add_chain_response,
    embedded_scts,
    log_id_for_key,
    verify_sct_signature,
)
from sigtrust.exceptions import ConfigError, ParseError, VerificationFailedError

from factories import SCT_TIMESTAMP, FakeLog, spki


class TestLogID:
    def test_fixed_size(self):
        with pytest.raises(ParseError):
            LogID(b"\x00" * 31)

    def test_hashable_and_equal_to_bytes(self):
        raw = bytes(range(32))
        assert LogID(raw) == raw
        assert {LogID(raw): "x"}[raw] == "x"

    def test_log_id_for_key(self, ct_log):
        assert log_id_for_key(ct_log.public_key) == hashlib.sha256(spki(ct_log.public_key)).digest()


class TestEmbeddedSCTs:
    def test_none_embedded(self, root_ca):
        assert embedded_scts(root_ca.issue_leaf()) == []

    def test_extracts_records(self, root_ca, ct_log):
        other = FakeLog()
        leaf = root_ca.issue_leaf_with_scts(ct_log, other)
        scts = embedded_scts(leaf)
        assert [s.log_id for s in scts] == [ct_log.log_id, other.log_id]
        sct = scts[0]
        assert sct.version == 0
        assert sct.timestamp == SCT_TIMESTAMP
        assert sct.issued_at == datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=timezone.utc)
        assert sct.extensions == b""
        assert (sct.hash_algorithm, sct.signature_algorithm) == (4, 3)

    def test_precertificate_signature_verifies(self, root_ca, ct_log):
        leaf = root_ca.issue_leaf_with_scts(ct_log)
        verify_sct_signature(ct_log.public_key, embedded_scts(leaf)[0], leaf, root_ca.cert)

    def test_wrong_issuer_fails(self, root_ca, intermediate_ca, ct_log):
        leaf = root_ca.issue_leaf_with_scts(ct_log)
        with pytest.raises(VerificationFailedError):
            verify_sct_signature(ct_log.public_key, embedded_scts(leaf)[0], leaf, intermediate_ca.cert)

    def test_wrong_key_fails(self, root_ca, ct_log):
        leaf = root_ca.issue_leaf_with_scts(ct_log)
        with pytest.raises(VerificationFailedError):
            verify_sct_signature(FakeLog().public_key, embedded_scts(leaf)[0], leaf, root_ca.cert)


class TestAddChainResponse:
    def test_decode(self, root_ca, ct_log):
        leaf = root_ca.issue_leaf()
        sct = decode_add_chain_response(ct_log.detached_sct(leaf)).to_sct()
        assert sct.log_id == ct_log.log_id
        assert sct.timestamp == SCT_TIMESTAMP
        verify_sct_signature(ct_log.public_key, sct, leaf)

    def test_rsa_log(self, root_ca):
        log = FakeLog(rsa.generate_private_key(public_exponent=65537, key_size=2048))
        leaf = root_ca.issue_leaf()
        sct = decode_add_chain_response(log.detached_sct(leaf)).to_sct()
        assert sct.signature_algorithm == 1
        verify_sct_signature(log.public_key, sct, leaf)

    def test_not_json(self):
        with pytest.raises(ConfigError, match="malformed detached SCT"):
            decode_add_chain_response(b"not json")

    def test_missing_fields(self):
        with pytest.raises(ConfigError):
            decode_add_chain_response(json.dumps({"sct_version": 0}).encode())

    def test_bad_base64(self):
        response = AddChainResponse(sct_version=0, id="!!!", timestamp=1, signature="AAAAAA==")
        with pytest.raises(ParseError, match="base64"):
            response.to_sct()

    def test_short_log_id(self):
        response = AddChainResponse(
            sct_version=0,
            id=base64.b64encode(b"\x01" * 16).decode(),
            timestamp=1,
            signature=base64.b64encode(struct.pack(">BBH", 4, 3, 0)).decode(),
        )
        with pytest.raises(ParseError, match="32 bytes"):
            response.to_sct()

    def test_truncated_signature(self):
        response = AddChainResponse(
            sct_version=0,
            id=base64.b64encode(b"\x01" * 32).decode(),
            timestamp=1,
            signature=base64.b64encode(struct.pack(">BBH", 4, 3, 10) + b"abc").decode(),
        )
        with pytest.raises(ParseError, match="length"):
            response.to_sct()


class TestSignatureChecks:
    def _record(self, **overrides) -> SCTRecord:
        fields = dict(
            version=0,
            log_id=LogID(b"\x00" * 32),
            timestamp=SCT_TIMESTAMP,
            extensions=b"",
            hash_algorithm=4,
            signature_algorithm=3,
            signature=b"\x30\x00",
        )
        fields.update(overrides)
        return SCTRecord(**fields)

    def test_unsupported_version(self, root_ca, ct_log):
        with pytest.raises(VerificationFailedError, match="version"):
            verify_sct_signature(ct_log.public_key, self._record(version=1), root_ca.issue_leaf())

    def test_unsupported_hash(self, root_ca, ct_log):
        with pytest.raises(VerificationFailedError, match="hash"):
            verify_sct_signature(ct_log.public_key, self._record(hash_algorithm=2), root_ca.issue_leaf())

    def test_algorithm_mismatch(self, root_ca, ct_log):
        with pytest.raises(VerificationFailedError, match="does not match"):
            verify_sct_signature(
                ct_log.public_key, self._record(signature_algorithm=1), root_ca.issue_leaf()
            )

    def test_tampered_detached(self, root_ca, ct_log):
        leaf = root_ca.issue_leaf()
        sct = decode_add_chain_response(ct_log.detached_sct(leaf, tamper=True)).to_sct()
        with pytest.raises(VerificationFailedError):
            verify_sct_signature(ct_log.public_key, sct, leaf)
