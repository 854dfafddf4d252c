"""Paginated result listing models and query options."""

from datetime import date, timedelta
from typing import Annotated, List, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from realitydefender.detection.status import is_analyzing
from realitydefender.schemas.detection import DetectionResult, ResultSnapshot


def as_seconds(value: Union[float, int, timedelta]) -> float:
    """Durations are accepted as seconds or as timedelta."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value


Seconds = Annotated[float, BeforeValidator(as_seconds)]


class ResultPage(BaseModel):
    """One page of summarized results (page numbers are 0-based)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    total_items: int = 0
    total_pages: int = 0
    current_page: int = 0
    current_page_items_count: int = 0
    items: Tuple[ResultSnapshot, ...] = ()

    @field_validator("items", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return () if value is None else value

    @property
    def is_settled(self) -> bool:
        return not any(is_analyzing(item.status) for item in self.items)


class DetectionResultList(BaseModel):
    """Wire shape of GET /api/v2/media/users/pages/{n}."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    total_items: int = 0
    total_pages: int = 0
    current_page: int = 0
    current_page_items_count: int = 0
    items: Optional[List[DetectionResult]] = Field(None, alias="mediaList")

    def summarize(self) -> ResultPage:
        return ResultPage(
            total_items=self.total_items,
            total_pages=self.total_pages,
            current_page=self.current_page,
            current_page_items_count=self.current_page_items_count,
            items=tuple(item.summarize() for item in self.items or ()),
        )


class GetResultsOptions(BaseModel):
    """Filters, pagination and settling budget for get_results()."""

    page_number: int = Field(0, ge=0)
    size: Optional[int] = Field(None, gt=0)
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_attempts: int = 1
    polling_interval: Optional[Seconds] = Field(None, ge=0)
