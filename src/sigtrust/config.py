"""
Trust configuration

Environment-style overrides that decide where root certificates and CT log
keys come from.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from sigtrust.constants import (
    DEFAULT_TUF_ROOT,
    ENV_CT_LOG_PUBLIC_KEY_FILE,
    ENV_ROOT_FILE,
    ENV_TUF_ROOT,
)


class TrustConfig(BaseModel):
    """Configuration for trust material resolution.

    Attributes:
        root_file: PEM file of root/intermediate certificates that replaces the
            trust-distribution service entirely.
        ct_log_public_key_file: PEM or DER CT log public key that replaces the
            distributed log keys.
        tuf_root: Directory of the local trust repository cache.
    """

    root_file: Optional[Path] = Field(
        default=None, description="Override file of PEM root/intermediate certificates"
    )
    ct_log_public_key_file: Optional[Path] = Field(
        default=None, description="Override file holding a CT log public key"
    )
    tuf_root: Path = Field(
        default_factory=lambda: Path(DEFAULT_TUF_ROOT).expanduser(),
        description="Local trust repository directory",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TrustConfig":
        """Build a config from environment variables.

        Empty values are treated as unset.
        """
        env = os.environ if environ is None else environ

        def _path(name: str) -> Optional[Path]:
            value = env.get(name, "")
            return Path(value) if value else None

        values: dict = {
            "root_file": _path(ENV_ROOT_FILE),
            "ct_log_public_key_file": _path(ENV_CT_LOG_PUBLIC_KEY_FILE),
        }
        tuf_root = _path(ENV_TUF_ROOT)
        if tuf_root is not None:
            values["tuf_root"] = tuf_root.expanduser()
        return cls(**values)
