"""
Certificate transparency

SCT records, CT log key resolution and SCT verification.
"""

from .advisory import Advisory, AdvisoryKind
from .registry import LogKeyEntry, LogKeyRegistry
from .sct import (
    AddChainResponse,
    LogID,
    SCTRecord,
    decode_add_chain_response,
    embedded_scts,
    log_id_for_key,
    signature_input,
    verify_sct_signature,
)
from .verify import (
    SCTMode,
    SCTVerificationResult,
    SCTVerifier,
    contains_sct,
    verify_embedded_sct,
    verify_sct,
)

__all__ = [
    "Advisory",
    "AdvisoryKind",
    "LogKeyEntry",
    "LogKeyRegistry",
    "AddChainResponse",
    "LogID",
    "SCTRecord",
    "decode_add_chain_response",
    "embedded_scts",
    "log_id_for_key",
    "signature_input",
    "verify_sct_signature",
    "SCTMode",
    "SCTVerificationResult",
    "SCTVerifier",
    "contains_sct",
    "verify_embedded_sct",
    "verify_sct",
]
