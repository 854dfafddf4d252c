import logging

from realitydefender.client import RealityDefender
from realitydefender.core.errors import (
    DetectionTimeoutError,
    ErrorKind,
    FetchFailedError,
    PollingInterruptedError,
    RealityDefenderError,
    ResultParseError,
)
from realitydefender.detection.polling import PollConfig
from realitydefender.detection.status import DetectionStatus
from realitydefender.schemas import (
    GetResultsOptions,
    ModelResult,
    ResultPage,
    ResultSnapshot,
    UploadResponse,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "RealityDefender",
    "RealityDefenderError",
    "ErrorKind",
    "DetectionTimeoutError",
    "PollingInterruptedError",
    "FetchFailedError",
    "ResultParseError",
    "PollConfig",
    "DetectionStatus",
    "GetResultsOptions",
    "ModelResult",
    "ResultPage",
    "ResultSnapshot",
    "UploadResponse",
]
