# Copyright (c) sigtrust Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for sigtrust.

All sigtrust exceptions inherit from SigTrustError, so callers can treat any
trust decision failure uniformly while still telling the kinds apart.
"""


class SigTrustError(Exception):
    """Base exception for all sigtrust errors."""


class ConfigError(SigTrustError):
    """Malformed or inaccessible override path, override content, or SCT container."""


class SourceUnavailableError(SigTrustError):
    """The trust-distribution source could not be queried."""


class ParseError(SigTrustError):
    """Malformed PEM/DER, certificate, public key, or SCT record."""


class UnsupportedKeyTypeError(ParseError):
    """A distributed log key uses an algorithm other than elliptic-curve."""


class TrustNotFoundError(SigTrustError):
    """No trust material was resolved, or an SCT names an unknown log."""


class VerificationFailedError(SigTrustError):
    """Cryptographic verification of an SCT failed."""


class PolicyViolationError(SigTrustError):
    """The certificate carries no SCT evidence at all."""


__all__ = [
    "SigTrustError",
    "ConfigError",
    "SourceUnavailableError",
    "ParseError",
    "UnsupportedKeyTypeError",
    "TrustNotFoundError",
    "VerificationFailedError",
    "PolicyViolationError",
]
