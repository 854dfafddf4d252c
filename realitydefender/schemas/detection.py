"""
Detection result models.

`DetectionResult` mirrors the camelCase document returned by
GET /api/media/users/{requestId}. It is the only place that knows the wire
shape; `summarize()` reduces it to the immutable `ResultSnapshot` that the
polling engine and callers work with.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from realitydefender.detection.status import DetectionStatus, normalize_status


def _number_or_none(value: Any) -> Optional[float]:
    # predictionNumber is sometimes an object (per-frame breakdown); only scalars count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _status_or_none(value: Any) -> Optional[str]:
    # absent stays None so the status fallback chain can move on
    return None if value is None else normalize_status(value)


NormalizedStatus = Annotated[str, BeforeValidator(normalize_status)]
OptionalStatus = Annotated[Optional[str], BeforeValidator(_status_or_none)]
Score = Annotated[Optional[float], BeforeValidator(_number_or_none)]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )


class ModelResult(_WireModel):
    """One sub-model verdict."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    status: NormalizedStatus = DetectionStatus.UNKNOWN.value
    prediction_number: Score = None
    normalized_prediction_number: Optional[float] = None
    rolling_avg_number: Optional[float] = None
    final_score: Optional[float] = None
    error: Optional[str] = None
    code: Optional[str] = None
    data: Any = None

    @property
    def confidence(self) -> Optional[float]:
        return self.prediction_number

    @property
    def is_applicable(self) -> bool:
        return self.status != DetectionStatus.NOT_APPLICABLE.value


def applicable_models(models) -> Tuple[ModelResult, ...]:
    return tuple(m for m in models or () if m.is_applicable)


class ResultSnapshot(_WireModel):
    """Immutable point-in-time view of one job's detection result."""

    model_config = ConfigDict(frozen=True)

    request_id: Optional[str] = None
    status: NormalizedStatus = DetectionStatus.UNKNOWN.value
    score: Optional[float] = None
    models: Tuple[ModelResult, ...] = ()

    @field_validator("models", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return () if value is None else value

    @field_validator("models")
    @classmethod
    def _drop_not_applicable(cls, value):
        return applicable_models(value)


class UserInfo(_WireModel):
    email: Optional[str] = None
    is_api: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    plan_names: Optional[List[str]] = None
    tracking_id: Optional[str] = None
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    institution_uuid: Optional[str] = Field(None, alias="institutionUUID")
    institution_roles: Optional[List[str]] = None


class MediaMetadataInfo(BaseModel):
    # Nested under a snake_case key on the wire, fields are snake_case too.
    model_config = ConfigDict(extra="ignore")

    file_size: Optional[int] = None
    gps_information: Optional[Dict[str, Any]] = None
    audio_length: Optional[float] = None


class ResultsSummary(_WireModel):
    status: OptionalStatus = None
    metadata: Optional[Dict[str, Any]] = None


class DetectionResult(_WireModel):
    """Full result document as returned by the API."""

    request_id: Optional[str] = None
    name: Optional[str] = None
    filename: Optional[str] = None
    original_file_name: Optional[str] = None
    media_type: Optional[str] = None
    social_link: Optional[str] = None
    social_link_downloaded: bool = False
    social_link_download_failed: bool = False
    storage_location: Optional[str] = None
    thumbnail: Optional[str] = None
    user_id: Optional[str] = None
    institution_id: Optional[str] = None
    release_version: Optional[str] = None
    user_info: Optional[UserInfo] = None
    webhook_urls: Optional[List[str]] = None
    uploaded_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    aggregation_result_url: Optional[str] = None
    model_metadata_url: Optional[str] = None
    explainability_url: Optional[str] = None
    heatmaps: Optional[Dict[str, str]] = None
    media_metadata_info: Optional[MediaMetadataInfo] = Field(None, alias="media_metadata_info")

    # Status has lived in three places across API revisions.
    results_summary: Optional[ResultsSummary] = None
    overall_status: OptionalStatus = None
    flat_status: OptionalStatus = Field(None, alias="status")

    explicit_score: Score = Field(None, alias="score")
    models: Optional[List[ModelResult]] = None

    @property
    def status(self) -> str:
        summary_status = self.results_summary.status if self.results_summary is not None else None
        for candidate in (summary_status, self.overall_status, self.flat_status):
            if candidate is not None:
                return candidate
        return DetectionStatus.UNKNOWN.value

    @property
    def score(self) -> Optional[float]:
        """Aggregate confidence in 0..1; the summary's finalScore is a percentage."""
        if self.explicit_score is not None:
            return self.explicit_score
        if self.results_summary is None or not self.results_summary.metadata:
            return None
        final_score = _number_or_none(self.results_summary.metadata.get("finalScore"))
        if final_score is None:
            return None
        return final_score / 100.0

    def summarize(self) -> ResultSnapshot:
        return ResultSnapshot(
            request_id=self.request_id,
            status=self.status,
            score=self.score,
            models=applicable_models(self.models),
        )
