"""
Root of trust

Cached root and intermediate certificate pools.
"""

from .store import (
    CertificatePool,
    TrustPools,
    TrustRootStore,
    default_store,
    get_intermediates,
    get_roots,
    legacy_intermediates,
)

__all__ = [
    "CertificatePool",
    "TrustPools",
    "TrustRootStore",
    "default_store",
    "get_intermediates",
    "get_roots",
    "legacy_intermediates",
]
