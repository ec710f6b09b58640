"""
Certificate Utilities

PEM/DER loading and dumping for certificates and public keys. Library
errors are converted to ParseError here so callers only see sigtrust errors.
"""

from typing import Iterable

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from sigtrust.exceptions import ParseError

PEM_MARKER = b"-----BEGIN"


def load_certificates_from_pem(data: bytes) -> list[x509.Certificate]:
    """Parse every certificate in a PEM bundle.

    Raises:
        ParseError: If no certificate is found or one of them is malformed.
    """
    try:
        return x509.load_pem_x509_certificates(data)
    except ValueError as exc:
        raise ParseError(f"error unmarshalling certificates: {exc}") from exc


def load_certificate_from_pem(data: bytes) -> x509.Certificate:
    """Parse the first certificate of a PEM input."""
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError as exc:
        raise ParseError(f"error unmarshalling certificate: {exc}") from exc


def load_certificate(data: bytes) -> x509.Certificate:
    """Parse a certificate that may be either PEM or DER encoded."""
    if PEM_MARKER in data:
        return load_certificate_from_pem(data)
    try:
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise ParseError(f"error unmarshalling DER certificate: {exc}") from exc


def certificate_to_pem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


def certificates_to_pem(certs: Iterable[x509.Certificate]) -> bytes:
    return b"".join(certificate_to_pem(cert) for cert in certs)


def load_pem_public_key(data: bytes) -> PublicKeyTypes:
    """Parse a PEM ``PUBLIC KEY`` block.

    Raises:
        ParseError: If the data is not a supported PEM public key.
    """
    try:
        return serialization.load_pem_public_key(data)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise ParseError(f"error unmarshalling PEM public key: {exc}") from exc
