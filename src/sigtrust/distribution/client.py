"""
Trust Distribution Client

Contract for the service that hands out named trust artifacts (root
certificates, CT log keys) by usage, and a client backed by an
already-refreshed local trust repository.

Repository layout::

    <tuf_root>/targets.json        signed targets metadata
    <tuf_root>/targets/<name>      target files

Fetching, signing and freshness checks of the metadata belong to the
distribution protocol and are not performed here.
"""

from __future__ import annotations

import abc
import hashlib
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from sigtrust.config import TrustConfig
from sigtrust.constants import TARGETS_DIR, TARGETS_METADATA_FILE
from sigtrust.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class StatusKind(str, Enum):
    """Lifecycle status of a distributed trust artifact."""

    ACTIVE = "Active"
    EXPIRED = "Expired"


class UsageKind(str, Enum):
    """Role an artifact plays, as declared in its custom metadata."""

    FULCIO = "Fulcio"
    CTFE = "CTFE"


class TargetFile(BaseModel):
    """A resolved trust artifact."""

    name: str
    target: bytes
    status: StatusKind = StatusKind.ACTIVE


class SigstoreMetadata(BaseModel):
    usage: str
    status: StatusKind


class TargetMeta(BaseModel):
    """Per-target entry of the targets metadata."""

    length: int = Field(..., ge=0)
    hashes: dict[str, str] = Field(default_factory=dict)
    custom: Optional[dict] = None

    def sigstore(self) -> Optional[SigstoreMetadata]:
        """Return the sigstore custom metadata, or None if absent or malformed."""
        if not self.custom or "sigstore" not in self.custom:
            return None
        try:
            return SigstoreMetadata.model_validate(self.custom["sigstore"])
        except ValidationError:
            return None


class TrustClient(abc.ABC):
    """Abstract handle onto the trust-distribution service.

    Handles must be released with :meth:`close`; use them as context managers
    so release happens on every exit path.
    """

    @abc.abstractmethod
    def get_targets_by_meta(
        self, usage: UsageKind, fallbacks: Sequence[str]
    ) -> list[TargetFile]:
        """Return every target whose metadata declares *usage*.

        When nothing matches by metadata, each name in *fallbacks* is looked
        up directly and returned as active.

        Raises:
            SourceUnavailableError: If the service cannot be queried.
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Release the handle."""

    def __enter__(self) -> "TrustClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class LocalRepositoryClient(TrustClient):
    """Trust client reading a local trust repository cache.

    Args:
        root: Repository directory holding ``targets.json`` and ``targets/``.
        timeout: Caller deadline in seconds. Recorded for parity with remote
            clients; local reads do not block.
    """

    def __init__(self, root: Path, timeout: float | None = None) -> None:
        self.root = Path(root)
        self.timeout = timeout
        self._targets: dict[str, TargetMeta] | None = None
        self._closed = False

    def _load_targets(self) -> dict[str, TargetMeta]:
        if self._closed:
            raise SourceUnavailableError("trust client is closed")
        if self._targets is not None:
            return self._targets

        metadata_path = self.root / TARGETS_METADATA_FILE
        try:
            raw = metadata_path.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(
                f"reading trust metadata {metadata_path}: {exc}"
            ) from exc
        try:
            document = json.loads(raw)
        except ValueError as exc:
            raise SourceUnavailableError(
                f"decoding trust metadata {metadata_path}: {exc}"
            ) from exc

        signed = document.get("signed", document) if isinstance(document, dict) else None
        if not isinstance(signed, dict) or not isinstance(signed.get("targets"), dict):
            raise SourceUnavailableError(f"trust metadata {metadata_path} has no targets")
        try:
            self._targets = {
                name: TargetMeta.model_validate(meta)
                for name, meta in signed["targets"].items()
            }
        except ValidationError as exc:
            raise SourceUnavailableError(f"invalid target metadata: {exc}") from exc
        logger.debug("Loaded %d targets from %s", len(self._targets), metadata_path)
        return self._targets

    def get_target(self, name: str) -> bytes:
        """Read a target file and check it against its declared length and hash.

        Raises:
            SourceUnavailableError: If the target is unknown, unreadable, or
                does not match its metadata.
        """
        targets = self._load_targets()
        meta = targets.get(name)
        if meta is None:
            raise SourceUnavailableError(f"unknown target {name}")

        targets_dir = (self.root / TARGETS_DIR).resolve()
        path = (targets_dir / name).resolve()
        if targets_dir not in path.parents:
            raise SourceUnavailableError(f"target {name} escapes the repository")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(f"reading target {name}: {exc}") from exc

        if len(data) != meta.length:
            raise SourceUnavailableError(
                f"target {name} has length {len(data)}, expected {meta.length}"
            )
        expected = meta.hashes.get("sha256")
        if expected is not None and hashlib.sha256(data).hexdigest() != expected.lower():
            raise SourceUnavailableError(f"target {name} does not match its sha256 hash")
        return data

    def get_targets_by_meta(
        self, usage: UsageKind, fallbacks: Sequence[str]
    ) -> list[TargetFile]:
        targets = self._load_targets()
        usage_name = UsageKind(usage).value

        matched: list[TargetFile] = []
        for name in sorted(targets):
            custom = targets[name].sigstore()
            if custom is None or custom.usage != usage_name:
                continue
            matched.append(
                TargetFile(name=name, target=self.get_target(name), status=custom.status)
            )

        if not matched:
            for name in fallbacks:
                try:
                    data = self.get_target(name)
                except SourceUnavailableError as exc:
                    logger.debug("Fallback target %s not available: %s", name, exc)
                    continue
                matched.append(TargetFile(name=name, target=data))

        logger.debug("Resolved %d %s target(s)", len(matched), usage_name)
        return matched

    def close(self) -> None:
        self._closed = True
        self._targets = None


ClientFactory = Callable[[TrustConfig, Optional[float]], TrustClient]


def default_client_factory(config: TrustConfig, timeout: float | None = None) -> TrustClient:
    """Open a client on the configured local trust repository."""
    return LocalRepositoryClient(config.tuf_root, timeout=timeout)
