"""
Synchronous result reads for the polling engine.

Each call runs one HTTP GET on the client's background loop and maps the
JSON document through the wire models into a ResultSnapshot / ResultPage.
This is the only module that ties the engine to the wire format.
"""

import logging
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from realitydefender.core.errors import ResultParseError
from realitydefender.integrations.event_loop import BackgroundLoop
from realitydefender.integrations.http_client import HttpClient
from realitydefender.schemas.detection import DetectionResult, ResultSnapshot
from realitydefender.schemas.results import DetectionResultList, ResultPage

logger = logging.getLogger(__name__)


def parse_result(document: Any) -> ResultSnapshot:
    try:
        return DetectionResult.model_validate(document).summarize()
    except ValidationError as e:
        logger.error(f"[RESULTS] Unparseable detection result: {e.error_count()} error(s)")
        raise ResultParseError("Failed to parse detection result") from e


def parse_result_page(document: Any) -> ResultPage:
    try:
        return DetectionResultList.model_validate(document).summarize()
    except ValidationError as e:
        logger.error(f"[RESULTS] Unparseable result page: {e.error_count()} error(s)")
        raise ResultParseError("Failed to parse result page") from e


class ResultFetcher:
    def __init__(self, http: HttpClient, loop: BackgroundLoop):
        self._http = http
        self._loop = loop

    def __call__(self, request_id: str) -> ResultSnapshot:
        snapshot = parse_result(self._loop.run(self._http.get_result(request_id)))
        if snapshot.request_id is None:
            snapshot = snapshot.model_copy(update={"request_id": request_id})
        return snapshot

    def fetch_page(
        self,
        page_number: int,
        size: Optional[int] = None,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ResultPage:
        document = self._loop.run(
            self._http.get_results_page(page_number, size, name, start_date, end_date)
        )
        return parse_result_page(document)
