"""
Certificate and key handling

- PEM/DER certificate utilities
- Root vs. intermediate classification
- Tolerant public key parsing for override material
"""

from .classify import CertificateKind, classify, is_self_signed, raw_issuer_and_subject
from .keys import KeyAlgorithm, PublicKey, key_algorithm, parse_alternate_public_key
from .pem import (
    certificate_to_pem,
    certificates_to_pem,
    load_certificate,
    load_certificate_from_pem,
    load_certificates_from_pem,
    load_pem_public_key,
)

__all__ = [
    "CertificateKind",
    "classify",
    "is_self_signed",
    "raw_issuer_and_subject",
    "KeyAlgorithm",
    "PublicKey",
    "key_algorithm",
    "parse_alternate_public_key",
    "certificate_to_pem",
    "certificates_to_pem",
    "load_certificate",
    "load_certificate_from_pem",
    "load_certificates_from_pem",
    "load_pem_public_key",
]
