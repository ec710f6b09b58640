"""
SCT Verification

Checks that a code-signing certificate was recorded in the certificate
transparency log, using SCTs embedded in the certificate or a detached SCT
returned alongside it.

The SCT is a Signed Certificate Timestamp: the log's signed promise that the
certificate was, or will shortly be, added to the public log.

Log keys come from the trust-distribution service by default. For testing,
``SIGSTORE_CT_LOG_PUBLIC_KEY_FILE`` may point at a PEM or DER key instead.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from cryptography import x509
from pydantic import BaseModel, Field

from sigtrust.certs.pem import (
    certificate_to_pem,
    certificates_to_pem,
    load_certificate,
    load_certificate_from_pem,
    load_certificates_from_pem,
)
from sigtrust.config import TrustConfig
from sigtrust.ct.advisory import Advisory, AdvisoryKind
from sigtrust.ct.registry import LogKeyEntry, LogKeyRegistry
from sigtrust.ct.sct import (
    SCTRecord,
    decode_add_chain_response,
    embedded_scts,
    verify_sct_signature,
)
from sigtrust.distribution.client import ClientFactory, StatusKind
from sigtrust.exceptions import (
    ConfigError,
    ParseError,
    PolicyViolationError,
    TrustNotFoundError,
    VerificationFailedError,
)

logger = logging.getLogger(__name__)


class SCTMode(str, Enum):
    EMBEDDED = "embedded"
    DETACHED = "detached"


class SCTVerificationResult(BaseModel):
    """Outcome of a successful SCT verification.

    Attributes:
        mode: Whether embedded or detached SCTs were checked.
        verified: Number of SCTs whose signatures verified.
        advisories: Non-fatal notices, e.g. a log key past its active period.
    """

    mode: SCTMode
    verified: int = Field(..., ge=1)
    advisories: list[Advisory] = Field(default_factory=list)


def contains_sct(cert: bytes) -> bool:
    """Report whether a PEM or DER certificate carries embedded SCTs.

    No verification is performed.
    """
    return len(embedded_scts(load_certificate(cert))) != 0


class SCTVerifier:
    """Verifies SCTs against the CT log keys.

    Args:
        config: Trust configuration. Re-read from the environment on every
            call when omitted.
        client_factory: Opens trust-distribution clients for key lookup.
    """

    def __init__(
        self,
        config: TrustConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory

    def verify_sct(
        self,
        cert_pem: bytes,
        chain_pem: bytes,
        raw_sct: bytes = b"",
        *,
        timeout: float | None = None,
    ) -> SCTVerificationResult:
        """Verify the SCTs of a certificate.

        Embedded SCTs take priority: a detached SCT is only looked at when the
        certificate has none embedded. Every embedded SCT must verify.

        Args:
            cert_pem: PEM leaf certificate.
            chain_pem: PEM chain, issuer first.
            raw_sct: Detached add-chain response JSON, possibly empty.
            timeout: Deadline in seconds for trust-distribution lookups.

        Raises:
            PolicyViolationError: If no SCT is present at all.
            TrustNotFoundError: If an SCT names a log with no known key.
            VerificationFailedError: If an SCT signature does not verify.
        """
        config = self._config or TrustConfig.from_env()
        registry = LogKeyRegistry.build(config, self._client_factory, timeout)
        advisories = list(registry.advisories)

        cert = load_certificate_from_pem(cert_pem)
        try:
            chain = load_certificates_from_pem(chain_pem)
        except ParseError as exc:
            raise ParseError(f"no certificate chain found: {exc}") from exc

        embedded = embedded_scts(cert)
        if embedded:
            logger.info("Verifying %d embedded SCT(s)", len(embedded))
            for sct in embedded:
                entry = _lookup(registry, sct, "ctfe public key not found for embedded SCT")
                try:
                    verify_sct_signature(entry.public_key, sct, cert, chain[0])
                except VerificationFailedError as exc:
                    raise VerificationFailedError(f"error verifying embedded SCT: {exc}") from exc
                _note_expired(entry, advisories, "embedded SCT")
            logger.info("Embedded SCTs verified")
            return SCTVerificationResult(
                mode=SCTMode.EMBEDDED, verified=len(embedded), advisories=advisories
            )

        if not raw_sct:
            raise PolicyViolationError("no SCT found")

        logger.info("Verifying detached SCT")
        sct = decode_add_chain_response(raw_sct).to_sct()
        entry = _lookup(registry, sct, "ctfe public key not found")
        try:
            verify_sct_signature(entry.public_key, sct, cert)
        except VerificationFailedError as exc:
            raise VerificationFailedError(f"error verifying SCT: {exc}") from exc
        _note_expired(entry, advisories, "SCT")
        logger.info("Detached SCT verified")
        return SCTVerificationResult(mode=SCTMode.DETACHED, verified=1, advisories=advisories)

    def verify_embedded_sct(
        self,
        chain: Sequence[x509.Certificate],
        *,
        timeout: float | None = None,
    ) -> SCTVerificationResult:
        """Verify the embedded SCTs of ``chain[0]`` using ``chain[1]`` as issuer.

        Raises:
            ConfigError: If the chain holds fewer than two certificates.
        """
        if len(chain) < 2:
            raise ConfigError("certificate chain must contain at least a certificate and its issuer")
        return self.verify_sct(
            certificate_to_pem(chain[0]),
            certificates_to_pem(chain[1:]),
            b"",
            timeout=timeout,
        )


def _lookup(registry: LogKeyRegistry, sct: SCTRecord, message: str) -> LogKeyEntry:
    entry = registry.get(sct.log_id)
    if entry is None:
        raise TrustNotFoundError(f"{message} (log ID {sct.log_id.hex()})")
    return entry


def _note_expired(entry: LogKeyEntry, advisories: list[Advisory], what: str) -> None:
    if entry.status is StatusKind.ACTIVE:
        return
    message = f"Successfully verified {what} using an expired verification key"
    logger.warning(message)
    advisories.append(Advisory(kind=AdvisoryKind.EXPIRED_LOG_KEY, message=message))


def verify_sct(
    cert_pem: bytes,
    chain_pem: bytes,
    raw_sct: bytes = b"",
    *,
    timeout: float | None = None,
) -> SCTVerificationResult:
    """Verify SCTs using environment configuration; see :meth:`SCTVerifier.verify_sct`."""
    return SCTVerifier().verify_sct(cert_pem, chain_pem, raw_sct, timeout=timeout)


def verify_embedded_sct(
    chain: Sequence[x509.Certificate],
    *,
    timeout: float | None = None,
) -> SCTVerificationResult:
    """Verify embedded SCTs using environment configuration."""
    return SCTVerifier().verify_embedded_sct(chain, timeout=timeout)
