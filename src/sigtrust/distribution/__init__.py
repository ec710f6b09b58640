"""
Trust distribution

Access to named trust artifacts and the choice between override files and
the distribution service.
"""

from .client import (
    ClientFactory,
    LocalRepositoryClient,
    StatusKind,
    TargetFile,
    TrustClient,
    UsageKind,
    default_client_factory,
)
from .source import LocalOverride, RemoteDistribution, TrustSource, resolve_trust_source

__all__ = [
    "ClientFactory",
    "LocalRepositoryClient",
    "StatusKind",
    "TargetFile",
    "TrustClient",
    "UsageKind",
    "default_client_factory",
    "LocalOverride",
    "RemoteDistribution",
    "TrustSource",
    "resolve_trust_source",
]
