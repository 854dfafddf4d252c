"""
Detection workflows: upload, wait for results, list results.

Pure sequencing over the uploader, the polling engine and the page poller.
Every blocking operation has an `_async` twin that runs it on the engine's
worker pool and returns a concurrent.futures.Future.
"""

import logging
from concurrent.futures import Future
from typing import Optional

from realitydefender.config import Settings
from realitydefender.detection.pagination import PaginatedResultsPoller
from realitydefender.detection.polling import (
    Duration,
    ErrorCallback,
    PollConfig,
    PollingEngine,
    ResultCallback,
)
from realitydefender.schemas.detection import ResultSnapshot
from realitydefender.schemas.results import GetResultsOptions, ResultPage
from realitydefender.schemas.upload import UploadResponse
from realitydefender.services.uploader import PathLike, Uploader

logger = logging.getLogger(__name__)


class DetectionService:
    def __init__(
        self,
        uploader: Uploader,
        engine: PollingEngine,
        pager: PaginatedResultsPoller,
        config: Settings,
    ):
        self.uploader = uploader
        self.engine = engine
        self.pager = pager
        self.config = config

    # ------------------------------------------------------------------ #
    # Upload                                                              #
    # ------------------------------------------------------------------ #

    def upload(self, file_path: PathLike) -> UploadResponse:
        return self.uploader.upload(file_path)

    def upload_async(self, file_path: PathLike) -> Future:
        return self.engine.submit(self.upload, file_path)

    def upload_social_media(self, url: str) -> UploadResponse:
        return self.uploader.upload_social_media(url)

    def upload_social_media_async(self, url: str) -> Future:
        return self.engine.submit(self.upload_social_media, url)

    # ------------------------------------------------------------------ #
    # Results for one request                                             #
    # ------------------------------------------------------------------ #

    def poll_config(
        self,
        polling_interval: Optional[Duration] = None,
        max_attempts: Optional[int] = None,
        max_duration: Optional[Duration] = None,
    ) -> PollConfig:
        """Resolve a budget: attempts and duration are mutually exclusive."""
        if max_attempts is not None and max_duration is not None:
            raise ValueError("Pass either max_attempts or max_duration, not both")
        if polling_interval is None and max_attempts is None and max_duration is None:
            return self.engine.default_config

        if polling_interval is None:
            polling_interval = self.config.polling_interval_sec
        if max_attempts is not None:
            return PollConfig(polling_interval=polling_interval, max_attempts=max_attempts)
        if max_duration is None:
            max_duration = self.config.result_timeout_sec
        return PollConfig.from_duration(max_duration, polling_interval)

    def get_result(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_attempts: Optional[int] = None,
        max_duration: Optional[Duration] = None,
    ) -> ResultSnapshot:
        """Block until the request reaches a terminal status."""
        config = self.poll_config(polling_interval, max_attempts, max_duration)
        return self.engine.poll(request_id, config)

    def get_result_async(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_attempts: Optional[int] = None,
        max_duration: Optional[Duration] = None,
    ) -> Future:
        config = self.poll_config(polling_interval, max_attempts, max_duration)
        return self.engine.poll_async(request_id, config)

    def check_status(self, request_id: str) -> ResultSnapshot:
        """Single fetch, no polling: the status may still be transient."""
        logger.debug(f"Checking status for request ID: {request_id}")
        return self.engine.fetch_once(request_id)

    def check_status_async(self, request_id: str) -> Future:
        return self.engine.submit(self.check_status, request_id)

    def poll_for_results(
        self,
        request_id: str,
        polling_interval: Optional[Duration],
        max_duration: Optional[Duration],
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None:
        self.engine.poll_with_callbacks(
            request_id,
            self.config.polling_interval_sec if polling_interval is None else polling_interval,
            self.config.result_timeout_sec if max_duration is None else max_duration,
            on_result,
            on_error,
        )

    def poll_for_results_async(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_duration: Optional[Duration] = None,
    ) -> Future:
        return self.engine.poll_with_callbacks_async(
            request_id,
            self.config.polling_interval_sec if polling_interval is None else polling_interval,
            self.config.result_timeout_sec if max_duration is None else max_duration,
        )

    # ------------------------------------------------------------------ #
    # Submit and wait                                                     #
    # ------------------------------------------------------------------ #

    def detect_file(self, file_path: PathLike) -> ResultSnapshot:
        upload = self.upload(file_path)
        return self.get_result(upload.request_id)

    def detect_file_async(self, file_path: PathLike) -> Future:
        return self.engine.submit(self.detect_file, file_path)

    def detect_social_media(self, url: str) -> ResultSnapshot:
        upload = self.upload_social_media(url)
        return self.get_result(upload.request_id)

    def detect_social_media_async(self, url: str) -> Future:
        return self.engine.submit(self.detect_social_media, url)

    # ------------------------------------------------------------------ #
    # Result listing                                                      #
    # ------------------------------------------------------------------ #

    def get_results(self, options: Optional[GetResultsOptions] = None) -> ResultPage:
        return self.pager.get_results(options)

    def get_results_async(self, options: Optional[GetResultsOptions] = None) -> Future:
        return self.engine.submit(self.get_results, options)
