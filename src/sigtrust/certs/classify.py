"""
Certificate Classifier

Separates root (self-signed) certificates from intermediates by comparing the
raw DER encodings of the subject and issuer names.
"""

from enum import Enum

from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from sigtrust.exceptions import ParseError


class CertificateKind(str, Enum):
    """Which pool a certificate belongs to."""

    ROOT = "root"
    INTERMEDIATE = "intermediate"


def raw_issuer_and_subject(cert: x509.Certificate) -> tuple[bytes, bytes]:
    """Return the issuer and subject Name encodings exactly as signed.

    The names are taken from the TBSCertificate as encoded instead of
    re-encoding the parsed names, so two names that differ only in string type
    or attribute order stay distinct.
    """
    der = cert.public_bytes(serialization.Encoding.DER)
    try:
        tbs = asn1_x509.Certificate.load(der)["tbs_certificate"]
        return tbs["issuer"].dump(), tbs["subject"].dump()
    except (ValueError, TypeError) as exc:
        raise ParseError(f"error reading certificate names: {exc}") from exc


def is_self_signed(cert: x509.Certificate) -> bool:
    """Root certificates are self-signed: subject bytes equal issuer bytes."""
    issuer, subject = raw_issuer_and_subject(cert)
    return issuer == subject


def classify(cert: x509.Certificate) -> CertificateKind:
    if is_self_signed(cert):
        return CertificateKind.ROOT
    return CertificateKind.INTERMEDIATE
