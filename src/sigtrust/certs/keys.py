"""
Public Key Parsing

Tolerant decoding for operator-supplied public keys, plus a closed set of the
key algorithms sigtrust knows how to reason about.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

from asn1crypto import pem
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from sigtrust.exceptions import ParseError, UnsupportedKeyTypeError

logger = logging.getLogger(__name__)

PublicKey = Union[
    ec.EllipticCurvePublicKey,
    rsa.RSAPublicKey,
    ed25519.Ed25519PublicKey,
]


class KeyAlgorithm(str, Enum):
    """Supported public key algorithms."""

    ECDSA = "ecdsa"
    RSA = "rsa"
    ED25519 = "ed25519"


def key_algorithm(key: PublicKeyTypes) -> KeyAlgorithm:
    """Map a decoded key onto the supported algorithm set.

    Raises:
        UnsupportedKeyTypeError: For any other key type (DSA, X25519, ...).
    """
    if isinstance(key, ec.EllipticCurvePublicKey):
        return KeyAlgorithm.ECDSA
    if isinstance(key, rsa.RSAPublicKey):
        return KeyAlgorithm.RSA
    if isinstance(key, ed25519.Ed25519PublicKey):
        return KeyAlgorithm.ED25519
    raise UnsupportedKeyTypeError(f"unsupported public key type {type(key).__name__}")


def _pem_payload(data: bytes) -> Optional[bytes]:
    """Return the DER body of the first PEM block, or None if there is none."""
    if not pem.detect(data):
        return None
    try:
        _, _, der = pem.unarmor(data)
    except ValueError as exc:
        logger.debug("Unreadable PEM block in alternate public key: %s", exc)
        return None
    return der


def parse_alternate_public_key(data: bytes) -> PublicKey:
    """Construct a public key from PEM, PKIX DER, or PKCS#1 DER bytes.

    Only used for operator-supplied override material. A PEM block is
    unwrapped first; otherwise the input is taken as DER. The DER loader
    accepts both SubjectPublicKeyInfo and the legacy RSA-only PKCS#1 form.

    Raises:
        ParseError: If none of the encodings apply.
        UnsupportedKeyTypeError: If the key decodes to an unsupported algorithm.
    """
    der = _pem_payload(data)
    if der is None:
        logger.debug("No PEM block in alternate public key, trying as DER")
        der = data

    try:
        key = serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise ParseError(f"failed to parse alternate public key: {exc}") from exc
    key_algorithm(key)
    return key
