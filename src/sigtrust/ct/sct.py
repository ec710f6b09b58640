"""
Signed Certificate Timestamps

RFC 6962 pieces needed to check that a certificate was logged:

- SCT records, from the certificate extension or a detached add-chain response
- log identifiers derived from log public keys
- the digitally-signed structure an SCT signature covers, and its verification
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from pydantic import BaseModel, Field, ValidationError

from sigtrust.constants import (
    ENTRY_TYPE_PRECERT,
    ENTRY_TYPE_X509,
    HASH_ALGORITHM_SHA256,
    HASH_ALGORITHM_SHA384,
    HASH_ALGORITHM_SHA512,
    LOG_ID_SIZE,
    SCT_VERSION_V1,
    SIGNATURE_ALGORITHM_ECDSA,
    SIGNATURE_ALGORITHM_RSA,
    SIGNATURE_TYPE_CERTIFICATE_TIMESTAMP,
)
from sigtrust.exceptions import ConfigError, ParseError, VerificationFailedError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_HASH_CODES = {
    "md5": 1,
    "sha1": 2,
    "sha224": 3,
    "sha256": HASH_ALGORITHM_SHA256,
    "sha384": HASH_ALGORITHM_SHA384,
    "sha512": HASH_ALGORITHM_SHA512,
}

_HASHES = {
    HASH_ALGORITHM_SHA256: hashes.SHA256,
    HASH_ALGORITHM_SHA384: hashes.SHA384,
    HASH_ALGORITHM_SHA512: hashes.SHA512,
}


class LogID(bytes):
    """SHA-256 identifier of a log's public key; always 32 bytes."""

    def __new__(cls, value: bytes) -> "LogID":
        if len(value) != LOG_ID_SIZE:
            raise ParseError(f"log ID must be {LOG_ID_SIZE} bytes, got {len(value)}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"LogID({self.hex()})"


@dataclass(frozen=True)
class SCTRecord:
    """A v1 Signed Certificate Timestamp.

    Attributes:
        version: SCT version (0 for v1).
        log_id: Identifier of the log that issued the SCT.
        timestamp: Milliseconds since the Unix epoch.
        extensions: Opaque CtExtensions bytes.
        hash_algorithm: TLS HashAlgorithm code of the signature.
        signature_algorithm: TLS SignatureAlgorithm code of the signature.
        signature: Raw signature bytes.
    """

    version: int
    log_id: LogID
    timestamp: int
    extensions: bytes
    hash_algorithm: int
    signature_algorithm: int
    signature: bytes

    @property
    def issued_at(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.timestamp)


def _millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def _record_from_extension(sct) -> SCTRecord:
    hash_name = sct.signature_hash_algorithm.name
    if hash_name not in _HASH_CODES:
        raise ParseError(f"unknown SCT hash algorithm {hash_name}")
    return SCTRecord(
        version=sct.version.value,
        log_id=LogID(sct.log_id),
        timestamp=_millis(sct.timestamp),
        extensions=sct.extension_bytes,
        hash_algorithm=_HASH_CODES[hash_name],
        signature_algorithm=sct.signature_algorithm.value,
        signature=sct.signature,
    )


def embedded_scts(cert: x509.Certificate) -> list[SCTRecord]:
    """Return the SCTs embedded in *cert*, or an empty list if there are none.

    Raises:
        ParseError: If the extension is present but malformed.
    """
    try:
        extension = cert.extensions.get_extension_for_class(
            x509.PrecertificateSignedCertificateTimestamps
        )
    except x509.ExtensionNotFound:
        return []
    except ValueError as exc:
        raise ParseError(f"error parsing embedded SCTs: {exc}") from exc
    return [_record_from_extension(sct) for sct in extension.value]


def _b64(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ParseError(f"invalid base64 in SCT {field}: {exc}") from exc


class AddChainResponse(BaseModel):
    """JSON body returned by a log's add-chain endpoint (RFC 6962 4.1)."""

    sct_version: int = Field(..., ge=0, le=255)
    id: str
    timestamp: int = Field(..., ge=0)
    extensions: str = ""
    signature: str

    def to_sct(self) -> SCTRecord:
        """Convert to an SCT record, unpacking the TLS DigitallySigned signature.

        Raises:
            ParseError: If any field does not decode.
        """
        signed = _b64(self.signature, "signature")
        if len(signed) < 4:
            raise ParseError("SCT signature is truncated")
        hash_algorithm, signature_algorithm, length = struct.unpack(">BBH", signed[:4])
        if len(signed) != 4 + length:
            raise ParseError("SCT signature length does not match its contents")
        return SCTRecord(
            version=self.sct_version,
            log_id=LogID(_b64(self.id, "id")),
            timestamp=self.timestamp,
            extensions=_b64(self.extensions, "extensions"),
            hash_algorithm=hash_algorithm,
            signature_algorithm=signature_algorithm,
            signature=signed[4:],
        )


def decode_add_chain_response(raw: bytes) -> AddChainResponse:
    """Decode a detached SCT payload.

    Raises:
        ConfigError: If the payload is not a well-formed add-chain response.
    """
    try:
        return AddChainResponse.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"malformed detached SCT payload: {exc}") from exc


def log_id_for_key(key: PublicKeyTypes) -> LogID:
    """Hash the DER SubjectPublicKeyInfo of a log key into its log ID."""
    der = key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return LogID(hashlib.sha256(der).digest())


def _uint24(length: int) -> bytes:
    return length.to_bytes(3, "big")


def signature_input(
    sct: SCTRecord,
    cert: x509.Certificate,
    issuer: Optional[x509.Certificate] = None,
) -> bytes:
    """Build the digitally-signed structure an SCT signature covers.

    With an issuer the entry is a precertificate entry (issuer key hash and
    the TBS without the SCT list); without one it is the DER leaf itself.
    """
    if issuer is not None:
        issuer_key = issuer.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        try:
            tbs = cert.tbs_precertificate_bytes
        except ValueError as exc:
            raise ParseError(f"error rebuilding precertificate: {exc}") from exc
        entry = (
            struct.pack(">H", ENTRY_TYPE_PRECERT)
            + hashlib.sha256(issuer_key).digest()
            + _uint24(len(tbs))
            + tbs
        )
    else:
        der = cert.public_bytes(serialization.Encoding.DER)
        entry = struct.pack(">H", ENTRY_TYPE_X509) + _uint24(len(der)) + der

    return (
        struct.pack(">BBQ", sct.version, SIGNATURE_TYPE_CERTIFICATE_TIMESTAMP, sct.timestamp)
        + entry
        + struct.pack(">H", len(sct.extensions))
        + sct.extensions
    )


def verify_sct_signature(
    key: PublicKeyTypes,
    sct: SCTRecord,
    cert: x509.Certificate,
    issuer: Optional[x509.Certificate] = None,
) -> None:
    """Check an SCT signature with the log's public key.

    Raises:
        VerificationFailedError: If the signature does not verify, or the SCT
            uses a version, hash, or algorithm the key cannot check.
    """
    if sct.version != SCT_VERSION_V1:
        raise VerificationFailedError(f"unsupported SCT version {sct.version}")
    hash_cls = _HASHES.get(sct.hash_algorithm)
    if hash_cls is None:
        raise VerificationFailedError(f"unsupported SCT hash algorithm {sct.hash_algorithm}")

    data = signature_input(sct, cert, issuer)
    try:
        if isinstance(key, ec.EllipticCurvePublicKey):
            if sct.signature_algorithm != SIGNATURE_ALGORITHM_ECDSA:
                raise VerificationFailedError("SCT signature algorithm does not match ECDSA log key")
            key.verify(sct.signature, data, ec.ECDSA(hash_cls()))
        elif isinstance(key, rsa.RSAPublicKey):
            if sct.signature_algorithm != SIGNATURE_ALGORITHM_RSA:
                raise VerificationFailedError("SCT signature algorithm does not match RSA log key")
            key.verify(sct.signature, data, padding.PKCS1v15(), hash_cls())
        else:
            raise VerificationFailedError(
                f"log key type {type(key).__name__} cannot verify SCTs"
            )
    except InvalidSignature as exc:
        raise VerificationFailedError("SCT signature verification failed") from exc
