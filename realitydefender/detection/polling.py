"""
Result polling engine.

Repeatedly fetches a request's ResultSnapshot until its status is terminal
or the budget runs out. Three call shapes share the same termination rules:

  poll()                 blocking loop on the caller's thread
  poll_async()           the same loop on a worker pool, returns a Future
  poll_with_callbacks()  one fetch per scheduler tick, rescheduling itself

Budgets are either an attempt count or a wall-clock duration. A duration is
turned into an attempt count (floor(duration / interval), at least 1) for
the blocking shapes; the callback shape checks elapsed time against the
deadline before every fetch instead.

Fetch errors are never retried: they surface on the first occurrence.
"""

import logging
import threading
import time
from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from realitydefender.core.errors import (
    DetectionTimeoutError,
    FetchFailedError,
    PollingInterruptedError,
    RealityDefenderError,
)
from realitydefender.detection.interrupts import Interrupter
from realitydefender.detection.scheduler import Scheduler
from realitydefender.detection.status import is_transient
from realitydefender.schemas.detection import ResultSnapshot
from realitydefender.schemas.results import Seconds, as_seconds

logger = logging.getLogger(__name__)

Duration = Union[float, int, timedelta]
ResultCallback = Callable[[ResultSnapshot], None]
ErrorCallback = Callable[[RealityDefenderError], None]


class PollConfig(BaseModel):
    """Interval between attempts plus the attempt budget."""

    model_config = ConfigDict(frozen=True)

    polling_interval: Seconds = Field(2.0, ge=0)
    max_attempts: int = Field(1, ge=1)

    @classmethod
    def from_duration(cls, max_duration: Duration, polling_interval: Duration) -> "PollConfig":
        """
        Derive an attempt budget from a wall-clock budget.

        Computed on whole milliseconds so 4s / 2s is exactly 2 attempts.
        A non-positive duration still yields one attempt.
        """
        interval_ms = round(as_seconds(polling_interval) * 1000)
        if interval_ms <= 0:
            raise ValueError("polling_interval must be positive when deriving attempts from a duration")
        duration_ms = round(as_seconds(max_duration) * 1000)
        attempts = duration_ms // interval_ms if duration_ms > 0 else 1
        return cls(polling_interval=interval_ms / 1000.0, max_attempts=max(1, attempts))


@dataclass(frozen=True)
class PollState:
    """Carried from one scheduled attempt to the next; never mutated."""

    request_id: str
    polling_interval: float
    max_duration: float
    started_at: Optional[float] = None
    attempts: int = 0


def _event_wait(event: threading.Event, seconds: float) -> bool:
    return event.wait(seconds)


class PollingEngine:
    def __init__(
        self,
        fetch_result: Callable[[str], ResultSnapshot],
        *,
        executor: Optional[Executor] = None,
        scheduler: Optional[Scheduler] = None,
        default_config: Optional[PollConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        wait: Callable[[threading.Event, float], bool] = _event_wait,
        interrupter: Optional[Interrupter] = None,
    ):
        """
        Args:
            fetch_result: request_id -> ResultSnapshot; one remote read per call.
            executor: worker pool behind poll_async().
            scheduler: delayed-task runner behind poll_with_callbacks().
            default_config: budget used when poll() gets no config.
            clock: monotonic seconds, used for callback deadlines.
            wait: interruptible sleep; returns True when the event was set.
            interrupter: registry of sleeping polls; may be shared with other pollers.
        """
        self._fetch_result = fetch_result
        self._executor = executor
        self._scheduler = scheduler
        self.default_config = default_config or PollConfig()
        self._clock = clock
        self._wait = wait
        self.interrupter = interrupter or Interrupter()
        self._pending: set = set()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Single fetch                                                        #
    # ------------------------------------------------------------------ #

    def fetch_once(self, request_id: str) -> ResultSnapshot:
        """Fetch the current snapshot, classifying any failure."""
        try:
            return self._fetch_result(request_id)
        except RealityDefenderError as e:
            if e.request_id is None:
                e.request_id = request_id
            raise
        except Exception as e:
            raise FetchFailedError(
                "Failed to get results", "RESULTS_FAILED", request_id=request_id
            ) from e

    # ------------------------------------------------------------------ #
    # Blocking                                                            #
    # ------------------------------------------------------------------ #

    def poll(
        self,
        request_id: str,
        config: Optional[PollConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResultSnapshot:
        """Poll on the calling thread until a terminal status or the budget runs out."""
        config = config or self.default_config
        logger.info(
            f"[POLLING] Getting results for {request_id} "
            f"(every {config.polling_interval}s, max {config.max_attempts} attempts)"
        )
        with self.interrupter.track(cancel_event) as cancel:
            return self._poll_loop(request_id, config, cancel)

    def _poll_loop(self, request_id: str, config: PollConfig, cancel: threading.Event) -> ResultSnapshot:
        for attempt in range(1, config.max_attempts + 1):
            snapshot = self.fetch_once(request_id)

            if not is_transient(snapshot.status):
                logger.info(
                    f"[POLLING] Detection completed for {request_id} with status "
                    f"{snapshot.status} after {attempt} attempt(s)"
                )
                return snapshot

            logger.debug(f"[POLLING] {request_id} still {snapshot.status} (attempt {attempt})")

            if attempt < config.max_attempts and self._wait(cancel, config.polling_interval):
                raise self._interrupted(request_id, attempt)

        if cancel.is_set():
            raise self._interrupted(request_id, config.max_attempts)

        logger.warning(
            f"[POLLING] Timeout waiting for {request_id} after {config.max_attempts} attempt(s)"
        )
        raise DetectionTimeoutError(
            "Timeout waiting for results", request_id=request_id, attempts=config.max_attempts
        )

    def poll_for_duration(
        self,
        request_id: str,
        max_duration: Duration,
        polling_interval: Duration,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResultSnapshot:
        return self.poll(
            request_id, PollConfig.from_duration(max_duration, polling_interval), cancel_event
        )

    # ------------------------------------------------------------------ #
    # Future-based                                                        #
    # ------------------------------------------------------------------ #

    def poll_async(
        self,
        request_id: str,
        config: Optional[PollConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Future:
        """Run poll() on the worker pool. The future raises the original error type."""
        return self.submit(self.poll, request_id, config, cancel_event)

    def submit(self, fn: Callable, *args) -> Future:
        """Run any blocking SDK call on the worker pool, tracked for shutdown."""
        if self._executor is None:
            raise RuntimeError("PollingEngine was created without an executor")
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    # ------------------------------------------------------------------ #
    # Callback-driven                                                     #
    # ------------------------------------------------------------------ #

    def poll_with_callbacks(
        self,
        request_id: str,
        polling_interval: Duration,
        max_duration: Duration,
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None:
        """
        Fire-and-forget polling. Exactly one of on_result / on_error is
        invoked, exactly once, from a scheduler thread.
        """
        if self._scheduler is None:
            raise RuntimeError("PollingEngine was created without a scheduler")

        state = PollState(
            request_id=request_id,
            polling_interval=as_seconds(polling_interval),
            max_duration=as_seconds(max_duration),
        )
        logger.info(f"[CALLBACK] Starting polling for request ID: {request_id}")
        self._scheduler.execute(
            self._poll_step, state, on_result, on_error, on_cancel=self._cancel_step
        )

    def poll_with_callbacks_async(
        self, request_id: str, polling_interval: Duration, max_duration: Duration
    ) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        self.poll_with_callbacks(
            request_id, polling_interval, max_duration, future.set_result, future.set_exception
        )
        return future

    def _poll_step(self, state: PollState, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        now = self._clock()
        if state.started_at is None:
            state = replace(state, started_at=now)

        if now - state.started_at >= state.max_duration:
            logger.warning(
                f"[CALLBACK] Timeout waiting for {state.request_id} after {state.attempts} attempt(s)"
            )
            _notify(on_error, DetectionTimeoutError(
                "Timeout waiting for results", request_id=state.request_id, attempts=state.attempts
            ))
            return

        try:
            snapshot = self.fetch_once(state.request_id)
        except RealityDefenderError as e:
            e.attempts = state.attempts + 1
            logger.error(f"[CALLBACK] Polling failed for {state.request_id}: {e.message}")
            _notify(on_error, e)
            return

        state = replace(state, attempts=state.attempts + 1)

        if not is_transient(snapshot.status):
            logger.info(
                f"[CALLBACK] Polling completed for {state.request_id} with status {snapshot.status}"
            )
            _notify(on_result, snapshot)
            return

        logger.debug(f"[CALLBACK] {state.request_id} still {snapshot.status}, rescheduling")
        try:
            self._scheduler.schedule(
                state.polling_interval,
                self._poll_step,
                state,
                on_result,
                on_error,
                on_cancel=self._cancel_step,
            )
        except RuntimeError:
            self._cancel_step(state, on_result, on_error)

    def _cancel_step(self, state: PollState, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        # A step the scheduler will never run still owes the caller one callback.
        _notify(on_error, self._interrupted(state.request_id, state.attempts))

    # ------------------------------------------------------------------ #
    # Lifecycle                                                           #
    # ------------------------------------------------------------------ #

    def interrupt(self) -> None:
        """
        Wake the polls running right now; they raise PollingInterruptedError.
        Polls started later are unaffected.
        """
        woken = self.interrupter.interrupt()
        logger.info(f"[POLLING] Interrupted {woken} running poll(s)")

    def shutdown(self, grace: float = 5.0) -> None:
        """
        Let outstanding futures finish for `grace` seconds, then interrupt and
        cancel the rest. Terminal: later poll() calls are interrupted at their
        first wait.
        """
        with self._lock:
            pending = list(self._pending)
        if pending:
            _, not_done = wait(pending, timeout=grace)
            if not_done:
                logger.warning(
                    f"[SHUTDOWN] {len(not_done)} poll(s) still running after {grace}s, interrupting"
                )
        self.interrupter.close()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _interrupted(request_id: str, attempts: int) -> PollingInterruptedError:
        logger.warning(f"[POLLING] Polling interrupted for {request_id}")
        return PollingInterruptedError("Polling interrupted", request_id=request_id, attempts=attempts)


def _notify(callback: Callable, value) -> None:
    try:
        callback(value)
    except Exception as e:
        logger.error(f"[CALLBACK] Callback {getattr(callback, '__name__', callback)} raised: {e!r}")
