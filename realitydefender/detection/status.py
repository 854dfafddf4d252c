"""
Status vocabulary normalization.

The service's status set is open-ended; only the markers below carry
meaning for polling. Everything else is an opaque terminal value.
"""

from enum import Enum
from typing import Optional


class DetectionStatus(str, Enum):
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    ANALYZING = "ANALYZING"
    MANIPULATED = "MANIPULATED"
    AUTHENTIC = "AUTHENTIC"
    SUSPICIOUS = "SUSPICIOUS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NOT_APPLICABLE = "NOT_APPLICABLE"
    UNKNOWN = "UNKNOWN"


# Legacy wire value -> canonical value
_ALIASES = {"FAKE": DetectionStatus.MANIPULATED.value}

TRANSIENT_STATUSES = frozenset({
    DetectionStatus.QUEUED.value,
    DetectionStatus.PROCESSING.value,
    DetectionStatus.ANALYZING.value,
    DetectionStatus.UNKNOWN.value,  # what a null status normalizes to
})


def normalize_status(raw: Optional[str]) -> str:
    """Map a raw wire status onto the canonical vocabulary. Never raises."""
    if raw is None:
        return DetectionStatus.UNKNOWN.value
    if isinstance(raw, DetectionStatus):
        return raw.value
    raw = str(raw)
    return _ALIASES.get(raw, raw)


def is_transient(status: Optional[str]) -> bool:
    """True while the job has not concluded (case-insensitive)."""
    if status is None:
        return True
    return normalize_status(status).upper() in TRANSIENT_STATUSES


def is_analyzing(status: Optional[str]) -> bool:
    """Page-level settling check: only ANALYZING holds a page back."""
    if status is None:
        return False
    return normalize_status(status).upper() == DetectionStatus.ANALYZING.value
