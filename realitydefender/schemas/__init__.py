from realitydefender.schemas.detection import (
    DetectionResult,
    MediaMetadataInfo,
    ModelResult,
    ResultSnapshot,
    ResultsSummary,
    UserInfo,
)
from realitydefender.schemas.results import DetectionResultList, GetResultsOptions, ResultPage
from realitydefender.schemas.upload import (
    BasicResponse,
    SignedUrlResponse,
    SocialMediaResponse,
    UploadResponse,
)

__all__ = [
    "DetectionResult",
    "MediaMetadataInfo",
    "ModelResult",
    "ResultSnapshot",
    "ResultsSummary",
    "UserInfo",
    "DetectionResultList",
    "GetResultsOptions",
    "ResultPage",
    "BasicResponse",
    "SignedUrlResponse",
    "SocialMediaResponse",
    "UploadResponse",
]
