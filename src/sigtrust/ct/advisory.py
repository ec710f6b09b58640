"""Non-fatal notices attached to successful SCT verifications."""

from enum import Enum

from pydantic import BaseModel, Field


class AdvisoryKind(str, Enum):
    EXPIRED_LOG_KEY = "expired_log_key"
    NON_STANDARD_LOG_KEY = "non_standard_log_key"


class Advisory(BaseModel):
    """A caller-visible notice that does not change the verification outcome."""

    kind: AdvisoryKind
    message: str = Field(..., description="Human-readable notice")
