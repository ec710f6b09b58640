"""
CT Log Key Registry

Maps transparency-log IDs to the public key that verifies that log's SCTs
and the key's lifecycle status. Built fresh for each verification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from sigtrust.certs.keys import KeyAlgorithm, key_algorithm, parse_alternate_public_key
from sigtrust.certs.pem import load_pem_public_key
from sigtrust.config import TrustConfig
from sigtrust.constants import CTFE_TARGET, ENV_CT_LOG_PUBLIC_KEY_FILE
from sigtrust.ct.advisory import Advisory, AdvisoryKind
from sigtrust.ct.sct import LogID, log_id_for_key
from sigtrust.distribution.client import ClientFactory, StatusKind, UsageKind
from sigtrust.distribution.source import LocalOverride, resolve_trust_source
from sigtrust.exceptions import ParseError, TrustNotFoundError, UnsupportedKeyTypeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogKeyEntry:
    public_key: PublicKeyTypes
    status: StatusKind


@dataclass
class LogKeyRegistry:
    """Log ID to (public key, status) mapping for one verification call.

    Attributes:
        entries: Resolved keys by log ID.
        advisories: Non-fatal notices raised while resolving keys.
    """

    entries: dict[LogID, LogKeyEntry] = field(default_factory=dict)
    advisories: list[Advisory] = field(default_factory=list)

    def get(self, log_id: bytes) -> Optional[LogKeyEntry]:
        return self.entries.get(log_id)

    def __contains__(self, log_id: object) -> bool:
        return log_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[LogID]:
        return iter(self.entries)

    @classmethod
    def build(
        cls,
        config: TrustConfig,
        client_factory: ClientFactory | None = None,
        timeout: float | None = None,
    ) -> "LogKeyRegistry":
        """Resolve CT log keys from the override file or the distribution service.

        Raises:
            ConfigError: If the override file cannot be read.
            ParseError: If a key does not decode.
            UnsupportedKeyTypeError: If a distributed key is not elliptic-curve.
            SourceUnavailableError: If the distribution service query fails.
            TrustNotFoundError: If no key was resolved.
        """
        registry = cls()
        source = resolve_trust_source(config.ct_log_public_key_file, config, client_factory)

        if isinstance(source, LocalOverride):
            registry._add_override_key(source)
        else:
            targets = source.fetch(UsageKind.CTFE, [CTFE_TARGET], timeout)
            for target in targets:
                try:
                    key = load_pem_public_key(target.target)
                except ParseError as exc:
                    raise ParseError(f"CT log key {target.name}: {exc}") from exc
                if key_algorithm(key) is not KeyAlgorithm.ECDSA:
                    raise UnsupportedKeyTypeError(
                        f"invalid CT log key {target.name}: "
                        f"was {type(key).__name__}, require an elliptic-curve key"
                    )
                registry.entries[log_id_for_key(key)] = LogKeyEntry(key, target.status)

        if not registry.entries:
            raise TrustNotFoundError("none of the CT log keys have been found")
        logger.debug("Resolved %d CT log key(s)", len(registry.entries))
        return registry

    def _add_override_key(self, source: LocalOverride) -> None:
        message = f"Using a non-standard public key for verifying SCT: {source.path}"
        logger.warning(message)
        self.advisories.append(Advisory(kind=AdvisoryKind.NON_STANDARD_LOG_KEY, message=message))

        raw = source.read()
        try:
            key = parse_alternate_public_key(raw)
        except UnsupportedKeyTypeError:
            raise
        except ParseError as exc:
            raise ParseError(
                f"error parsing alternate public key from {ENV_CT_LOG_PUBLIC_KEY_FILE}: {exc}"
            ) from exc
        self.entries[log_id_for_key(key)] = LogKeyEntry(key, StatusKind.ACTIVE)
