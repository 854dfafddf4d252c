"""
SDK exception hierarchy.

Every failure surfaced to callers is a RealityDefenderError whose `kind`
tells "it never finished" (TIMEOUT, INTERRUPTED) apart from "the call
itself broke" (FETCH_FAILED, PARSE_FAILED). `code` keeps the finer-grained
reason (HTTP mapping, validation, ...).
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TIMEOUT = "TIMEOUT"
    INTERRUPTED = "INTERRUPTED"
    FETCH_FAILED = "FETCH_FAILED"
    PARSE_FAILED = "PARSE_FAILED"


class RealityDefenderError(Exception):
    """Base class for all SDK errors."""

    kind: ErrorKind = ErrorKind.FETCH_FAILED
    default_code: str = "UNKNOWN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: int = 0,
        request_id: Optional[str] = None,
        attempts: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code
        self.request_id = request_id
        self.attempts = attempts

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code}, request_id={self.request_id!r}, "
            f"attempts={self.attempts})"
        )


class DetectionTimeoutError(RealityDefenderError):
    """Polling budget exhausted while the status stayed transient."""

    kind = ErrorKind.TIMEOUT
    default_code = "TIMEOUT"


class PollingInterruptedError(RealityDefenderError):
    """Polling was cancelled while waiting between attempts."""

    kind = ErrorKind.INTERRUPTED
    default_code = "INTERRUPTED"


class FetchFailedError(RealityDefenderError):
    """The underlying HTTP call, upload or validation failed."""

    kind = ErrorKind.FETCH_FAILED
    default_code = "SERVER_ERROR"


class ResultParseError(RealityDefenderError):
    """A response could not be mapped to an SDK model."""

    kind = ErrorKind.PARSE_FAILED
    default_code = "PARSE_ERROR"
