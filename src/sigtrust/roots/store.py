"""
Trust Root Store

Process-wide root and intermediate certificate pools used to validate issued
code-signing certificates.

The pools are built once, on first use, from either the ``SIGSTORE_ROOT_FILE``
override or the trust-distribution service. The outcome of that build, pools
or error, is cached and replayed to every later caller.
"""

from __future__ import annotations

import logging
import threading
from importlib import resources
from typing import Iterable, Iterator, NamedTuple, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from sigtrust.certs.classify import CertificateKind, classify
from sigtrust.certs.pem import certificates_to_pem, load_certificates_from_pem
from sigtrust.config import TrustConfig
from sigtrust.constants import FULCIO_TARGET, FULCIO_V1_TARGET
from sigtrust.distribution.client import ClientFactory, UsageKind
from sigtrust.distribution.source import LocalOverride, resolve_trust_source
from sigtrust.exceptions import ParseError, SigTrustError, TrustNotFoundError

logger = logging.getLogger(__name__)

# Untrusted intermediate CA certificate used for chain building.
# TODO: drop once the trust-distribution metadata ships this intermediate.
LEGACY_INTERMEDIATE_RESOURCE = "fulcio_intermediate_v1.crt.pem"


def legacy_intermediates() -> list[x509.Certificate]:
    """Load the intermediate certificate bundled with the package."""
    pem = resources.files(__package__).joinpath(LEGACY_INTERMEDIATE_RESOURCE).read_bytes()
    return load_certificates_from_pem(pem)


class CertificatePool:
    """Immutable, de-duplicated set of certificates.

    Insertion order is kept so listings are stable.
    """

    def __init__(self, certificates: Iterable[x509.Certificate] = ()) -> None:
        seen: set[bytes] = set()
        unique: list[x509.Certificate] = []
        for cert in certificates:
            fingerprint = cert.fingerprint(hashes.SHA256())
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            unique.append(cert)
        self._certificates = tuple(unique)
        self._fingerprints = frozenset(seen)

    @property
    def certificates(self) -> tuple[x509.Certificate, ...]:
        return self._certificates

    def find_by_subject(self, subject: x509.Name) -> list[x509.Certificate]:
        """Return the certificates whose subject equals *subject*."""
        return [cert for cert in self._certificates if cert.subject == subject]

    def to_pem(self) -> bytes:
        return certificates_to_pem(self._certificates)

    def __contains__(self, cert: object) -> bool:
        if not isinstance(cert, x509.Certificate):
            return False
        return cert.fingerprint(hashes.SHA256()) in self._fingerprints

    def __iter__(self) -> Iterator[x509.Certificate]:
        return iter(self._certificates)

    def __len__(self) -> int:
        return len(self._certificates)

    def __repr__(self) -> str:
        return f"CertificatePool({len(self)} certificates)"


class TrustPools(NamedTuple):
    roots: CertificatePool
    intermediates: CertificatePool


def _partition(
    certs: Iterable[x509.Certificate],
    roots: list[x509.Certificate],
    intermediates: list[x509.Certificate],
) -> None:
    for cert in certs:
        if classify(cert) is CertificateKind.ROOT:
            roots.append(cert)
        else:
            intermediates.append(cert)


class TrustRootStore:
    """Lazily built, cached pair of root and intermediate pools.

    Args:
        config: Trust configuration. Read from the environment at build time
            when omitted.
        client_factory: Opens trust-distribution clients for the remote path.

    The first caller of :meth:`pools`, :meth:`roots` or :meth:`intermediates`
    runs the build while concurrent callers wait; afterwards every call
    returns the cached pools or raises a copy of the cached error.
    """

    def __init__(
        self,
        config: TrustConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._lock = threading.Lock()
        self._built = False
        self._pools: Optional[TrustPools] = None
        self._error: Optional[SigTrustError] = None

    @property
    def built(self) -> bool:
        return self._built

    def pools(self, timeout: float | None = None) -> TrustPools:
        """Return both pools, building them on first use.

        Raises:
            SigTrustError: The build failure, with the same type and message
                for every caller and the cached error as its cause.
        """
        if not self._built:
            with self._lock:
                if not self._built:
                    try:
                        self._pools = self._build(timeout)
                    except SigTrustError as exc:
                        logger.error("Trust root build failed: %s", exc)
                        self._error = exc
                    self._built = True
        if self._pools is None:
            # each caller gets its own instance; the cached error is never re-raised
            raise type(self._error)(str(self._error)) from self._error
        return self._pools

    def roots(self, timeout: float | None = None) -> CertificatePool:
        return self.pools(timeout).roots

    def intermediates(self, timeout: float | None = None) -> CertificatePool:
        return self.pools(timeout).intermediates

    def _build(self, timeout: float | None) -> TrustPools:
        config = self._config or TrustConfig.from_env()
        source = resolve_trust_source(config.root_file, config, self._client_factory)

        roots: list[x509.Certificate] = []
        intermediates: list[x509.Certificate] = []

        if isinstance(source, LocalOverride):
            raw = source.read()
            try:
                certs = load_certificates_from_pem(raw)
            except ParseError as exc:
                raise ParseError(f"root override file {source.path}: {exc}") from exc
            _partition(certs, roots, intermediates)
            logger.info(
                "Loaded %d root(s) and %d intermediate(s) from %s",
                len(roots), len(intermediates), source.path,
            )
            return TrustPools(CertificatePool(roots), CertificatePool(intermediates))

        targets = source.fetch(UsageKind.FULCIO, [FULCIO_TARGET, FULCIO_V1_TARGET], timeout)
        if not targets:
            raise TrustNotFoundError("none of the Fulcio roots have been found")

        for target in targets:
            try:
                certs = load_certificates_from_pem(target.target)
            except ParseError as exc:
                raise ParseError(f"trust target {target.name}: {exc}") from exc
            _partition(certs, roots, intermediates)

        intermediates.extend(legacy_intermediates())

        if not roots:
            logger.warning("Trust distribution resolved no self-signed root certificates")
        logger.info(
            "Loaded %d root(s) and %d intermediate(s) from %d trust target(s)",
            len(roots), len(intermediates), len(targets),
        )
        return TrustPools(CertificatePool(roots), CertificatePool(intermediates))


_default_store = TrustRootStore()


def default_store() -> TrustRootStore:
    """Return the process-wide store."""
    return _default_store


def get_roots(timeout: float | None = None) -> CertificatePool:
    """Root pool of the process-wide store."""
    return _default_store.roots(timeout)


def get_intermediates(timeout: float | None = None) -> CertificatePool:
    """Intermediate pool of the process-wide store."""
    return _default_store.intermediates(timeout)
