"""Shared pytest fixtures."""

import pytest

from sigtrust.constants import ENV_CT_LOG_PUBLIC_KEY_FILE, ENV_ROOT_FILE, ENV_TUF_ROOT

from factories import CertificateAuthority, FakeLog


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's trust overrides out of the tests."""
    for var in (ENV_ROOT_FILE, ENV_CT_LOG_PUBLIC_KEY_FILE, ENV_TUF_ROOT):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def root_ca() -> CertificateAuthority:
    return CertificateAuthority("sigstore")


@pytest.fixture()
def intermediate_ca(root_ca) -> CertificateAuthority:
    return CertificateAuthority("sigstore-intermediate", parent=root_ca)


@pytest.fixture()
def ct_log() -> FakeLog:
    return FakeLog()
