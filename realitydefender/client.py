"""
Public SDK entry point.

    from realitydefender import RealityDefender

    with RealityDefender(api_key="...") as client:
        result = client.detect_file("image.jpg")
        print(result.status, result.score)

        future = client.detect_file_async("clip.mp4")
        print(future.result().status)

The client owns every background resource (event loop thread, HTTP
session, worker pool, scheduler) and releases them in close().
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from realitydefender.config import Settings, settings as default_settings
from realitydefender.detection.pagination import PaginatedResultsPoller
from realitydefender.detection.polling import (
    Duration,
    ErrorCallback,
    PollConfig,
    PollingEngine,
    ResultCallback,
)
from realitydefender.detection.scheduler import Scheduler
from realitydefender.integrations.event_loop import BackgroundLoop
from realitydefender.integrations.http_client import HttpClient
from realitydefender.schemas.detection import ResultSnapshot
from realitydefender.schemas.results import GetResultsOptions, ResultPage, as_seconds
from realitydefender.schemas.upload import UploadResponse
from realitydefender.services.detection_service import DetectionService
from realitydefender.services.result_fetcher import ResultFetcher
from realitydefender.services.uploader import PathLike, Uploader

logger = logging.getLogger(__name__)


class RealityDefender:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[Duration] = None,
        config: Optional[Settings] = None,
    ):
        """
        Args:
            api_key: overrides REALITY_DEFENDER_API_KEY.
            base_url: overrides the API root URL.
            timeout: per-HTTP-call timeout (seconds or timedelta).
            config: a Settings instance to start from instead of the global one.
        """
        overrides = {
            "api_key": api_key,
            "base_url": base_url,
            "request_timeout_sec": as_seconds(timeout) if timeout is not None else None,
        }
        self.config = (config or default_settings).model_copy(
            update={k: v for k, v in overrides.items() if v is not None}
        )
        if not self.config.api_key or not self.config.api_key.strip():
            raise ValueError("API key is required")

        self._closed = False
        self._loop = BackgroundLoop()
        self._http = HttpClient(self.config)
        self._scheduler = Scheduler(self._loop, max_workers=self.config.scheduler_pool_size)
        executor = ThreadPoolExecutor(
            max_workers=self.config.worker_pool_size, thread_name_prefix="realitydefender-worker"
        )

        fetcher = ResultFetcher(self._http, self._loop)
        self.engine = PollingEngine(
            fetcher,
            executor=executor,
            scheduler=self._scheduler,
            default_config=PollConfig.from_duration(
                self.config.result_timeout_sec, self.config.polling_interval_sec
            ),
        )
        pager = PaginatedResultsPoller(
            fetcher.fetch_page,
            default_polling_interval=self.config.page_polling_interval_sec,
            default_page_size=self.config.default_page_size,
            interrupter=self.engine.interrupter,
        )
        self.detection = DetectionService(
            Uploader(self._http, self._loop, self.config), self.engine, pager, self.config
        )
        logger.info(f"[STARTUP] Client ready for {self.config.base_url}")

    def __enter__(self) -> "RealityDefender":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Upload                                                              #
    # ------------------------------------------------------------------ #

    def upload(self, file_path: PathLike) -> UploadResponse:
        return self.detection.upload(file_path)

    def upload_async(self, file_path: PathLike) -> Future:
        return self.detection.upload_async(file_path)

    def upload_social_media(self, url: str) -> UploadResponse:
        return self.detection.upload_social_media(url)

    def upload_social_media_async(self, url: str) -> Future:
        return self.detection.upload_social_media_async(url)

    # ------------------------------------------------------------------ #
    # Results                                                             #
    # ------------------------------------------------------------------ #

    def get_result(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_attempts: Optional[int] = None,
        max_duration: Optional[Duration] = None,
    ) -> ResultSnapshot:
        return self.detection.get_result(request_id, polling_interval, max_attempts, max_duration)

    def get_result_async(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_attempts: Optional[int] = None,
        max_duration: Optional[Duration] = None,
    ) -> Future:
        return self.detection.get_result_async(request_id, polling_interval, max_attempts, max_duration)

    def check_status(self, request_id: str) -> ResultSnapshot:
        return self.detection.check_status(request_id)

    def check_status_async(self, request_id: str) -> Future:
        return self.detection.check_status_async(request_id)

    def poll_for_results(
        self,
        request_id: str,
        polling_interval: Optional[Duration],
        max_duration: Optional[Duration],
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None:
        self.detection.poll_for_results(request_id, polling_interval, max_duration, on_result, on_error)

    def poll_for_results_async(
        self,
        request_id: str,
        polling_interval: Optional[Duration] = None,
        max_duration: Optional[Duration] = None,
    ) -> Future:
        return self.detection.poll_for_results_async(request_id, polling_interval, max_duration)

    def detect_file(self, file_path: PathLike) -> ResultSnapshot:
        return self.detection.detect_file(file_path)

    def detect_file_async(self, file_path: PathLike) -> Future:
        return self.detection.detect_file_async(file_path)

    def detect_social_media(self, url: str) -> ResultSnapshot:
        return self.detection.detect_social_media(url)

    def detect_social_media_async(self, url: str) -> Future:
        return self.detection.detect_social_media_async(url)

    def get_results(self, options: Optional[GetResultsOptions] = None) -> ResultPage:
        return self.detection.get_results(options)

    def get_results_async(self, options: Optional[GetResultsOptions] = None) -> Future:
        return self.detection.get_results_async(options)

    # ------------------------------------------------------------------ #
    # Lifecycle                                                           #
    # ------------------------------------------------------------------ #

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release background resources. Idempotent; never raises."""
        if self._closed:
            return
        self._closed = True
        grace = self.config.shutdown_grace_sec

        steps = (
            ("scheduler", lambda: self._scheduler.shutdown(grace)),
            ("worker pool", lambda: self.engine.shutdown(grace)),
            ("http session", lambda: self._loop.run(self._http.close(), timeout=grace)),
            ("event loop", lambda: self._loop.stop(grace)),
        )
        for name, step in steps:
            try:
                step()
            except Exception as e:
                logger.warning(f"[SHUTDOWN] Error while closing {name}: {e!r}")
        logger.info("[SHUTDOWN] Client closed")
