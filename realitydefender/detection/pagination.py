"""
Paginated result listing with optional settling.

With max_attempts > 1 the same page is re-fetched while any item on it is
still ANALYZING, so callers can wait for a freshly uploaded batch to finish.
Only ANALYZING holds a page back; QUEUED and PROCESSING items do not.
"""

import logging
import threading
from datetime import date
from typing import Callable, Optional

from realitydefender.core.errors import (
    DetectionTimeoutError,
    FetchFailedError,
    PollingInterruptedError,
    RealityDefenderError,
)
from realitydefender.detection.interrupts import Interrupter
from realitydefender.schemas.results import GetResultsOptions, ResultPage

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, Optional[int], Optional[str], Optional[date], Optional[date]], ResultPage]


class PaginatedResultsPoller:
    def __init__(
        self,
        fetch_page: PageFetcher,
        *,
        default_polling_interval: float = 2.0,
        default_page_size: int = 10,
        interrupter: Optional[Interrupter] = None,
        wait: Callable[[threading.Event, float], bool] = lambda event, seconds: event.wait(seconds),
    ):
        self._fetch_page = fetch_page
        self.default_polling_interval = default_polling_interval
        self.default_page_size = default_page_size
        self.interrupter = interrupter or Interrupter()
        self._wait = wait

    def get_results(
        self,
        options: Optional[GetResultsOptions] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResultPage:
        options = options or GetResultsOptions()
        with self.interrupter.track(cancel_event) as cancel:
            return self._get_results(options, cancel)

    def _get_results(self, options: GetResultsOptions, cancel: threading.Event) -> ResultPage:
        page_number = options.page_number
        size = options.size if options.size is not None else self.default_page_size
        max_attempts = options.max_attempts
        interval = (
            options.polling_interval
            if options.polling_interval is not None
            else self.default_polling_interval
        )

        logger.info(f"[PAGES] Getting paginated results for page: {page_number}")

        if max_attempts <= 1:
            return self._fetch(options, size)

        for attempt in range(1, max_attempts + 1):
            page = self._fetch(options, size)

            if page.is_settled:
                logger.info(f"[PAGES] All results completed for page: {page_number}")
                return page

            if attempt < max_attempts:
                logger.debug(
                    f"[PAGES] Some results still analyzing on page {page_number}, "
                    f"waiting {interval}s before retry"
                )
                if self._wait(cancel, interval):
                    logger.warning(f"[PAGES] Polling interrupted for page: {page_number}")
                    raise PollingInterruptedError("Polling interrupted", attempts=attempt)

        if cancel.is_set():
            raise PollingInterruptedError("Polling interrupted", attempts=max_attempts)

        logger.warning(f"[PAGES] Page {page_number} still analyzing after {max_attempts} attempt(s)")
        raise DetectionTimeoutError("Timeout waiting for results", attempts=max_attempts)

    def _fetch(self, options: GetResultsOptions, size: int) -> ResultPage:
        try:
            page = self._fetch_page(
                options.page_number, size, options.name, options.start_date, options.end_date
            )
        except RealityDefenderError:
            raise
        except Exception as e:
            raise FetchFailedError("Failed to get results", "RESULTS_FAILED") from e
        logger.debug(f"[PAGES] Page parsed: {len(page.items)} items")
        return page
