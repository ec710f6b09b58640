"""
sigtrust - chain of trust for short-lived code-signing certificates

Root of trust · Certificate transparency

sigtrust resolves the root and intermediate certificates that issued
code-signing certificates chain up to, and verifies that those certificates
were recorded in the certificate transparency log via their SCTs.

Version: 0.1.0
"""

__version__ = "0.1.0"

from .config import TrustConfig

# Root of trust
from .roots import (
    CertificatePool,
    TrustPools,
    TrustRootStore,
    get_intermediates,
    get_roots,
)

# Certificate transparency
from .ct import (
    Advisory,
    AdvisoryKind,
    LogID,
    LogKeyRegistry,
    SCTMode,
    SCTVerificationResult,
    SCTVerifier,
    contains_sct,
    verify_embedded_sct,
    verify_sct,
)

from .certs import CertificateKind, classify, is_self_signed, parse_alternate_public_key

# Exceptions
from .exceptions import (
    SigTrustError,
    ConfigError,
    SourceUnavailableError,
    ParseError,
    UnsupportedKeyTypeError,
    TrustNotFoundError,
    VerificationFailedError,
    PolicyViolationError,
)

__all__ = [
    "__version__",
    "TrustConfig",
    # Root of trust
    "CertificatePool",
    "TrustPools",
    "TrustRootStore",
    "get_intermediates",
    "get_roots",
    # Certificate transparency
    "Advisory",
    "AdvisoryKind",
    "LogID",
    "LogKeyRegistry",
    "SCTMode",
    "SCTVerificationResult",
    "SCTVerifier",
    "contains_sct",
    "verify_embedded_sct",
    "verify_sct",
    # Certificates
    "CertificateKind",
    "classify",
    "is_self_signed",
    "parse_alternate_public_key",
    # Exceptions
    "SigTrustError",
    "ConfigError",
    "SourceUnavailableError",
    "ParseError",
    "UnsupportedKeyTypeError",
    "TrustNotFoundError",
    "VerificationFailedError",
    "PolicyViolationError",
]
