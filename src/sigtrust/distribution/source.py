"""
Trust Source Resolution

Decides whether trust material comes from an operator override file or from
the trust-distribution service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from sigtrust.config import TrustConfig
from sigtrust.distribution.client import (
    ClientFactory,
    TargetFile,
    TrustClient,
    UsageKind,
    default_client_factory,
)
from sigtrust.exceptions import ConfigError, SigTrustError, SourceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalOverride:
    """Trust material read from a single operator-supplied file."""

    path: Path

    def read(self) -> bytes:
        """Read the override file.

        Raises:
            ConfigError: If the file cannot be read.
        """
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise ConfigError(f"error reading override file {self.path}: {exc}") from exc


@dataclass(frozen=True)
class RemoteDistribution:
    """Trust material fetched through a trust-distribution client."""

    config: TrustConfig
    client_factory: ClientFactory = default_client_factory

    def open(self, timeout: float | None = None) -> TrustClient:
        return self.client_factory(self.config, timeout)

    def fetch(
        self,
        usage: UsageKind,
        fallbacks: Sequence[str],
        timeout: float | None = None,
    ) -> list[TargetFile]:
        """Open a client, query targets by usage, and release the client.

        Raises:
            SourceUnavailableError: If the client cannot be opened or queried.
                Failures that are not sigtrust errors are wrapped in it.
        """
        try:
            with self.open(timeout) as client:
                return client.get_targets_by_meta(usage, fallbacks)
        except SigTrustError:
            raise
        except Exception as exc:
            raise SourceUnavailableError(
                f"querying trust distribution for {UsageKind(usage).value} targets: {exc}"
            ) from exc


TrustSource = Union[LocalOverride, RemoteDistribution]


def resolve_trust_source(
    override: Optional[Path],
    config: TrustConfig,
    client_factory: ClientFactory | None = None,
) -> TrustSource:
    """Pick the override file when one is configured, the remote service otherwise."""
    if override is not None:
        logger.debug("Using trust override file %s", override)
        return LocalOverride(Path(override))
    return RemoteDistribution(config, client_factory or default_client_factory)
