"""
One-shot delayed task scheduler for callback-driven polling.

Timers are armed on the client's background event loop, so waiting never
occupies a thread; when a timer fires the task is handed to a small worker
pool where it may block on I/O without delaying other polls' timers.

A task may carry an `on_cancel` hook. Tasks that shutdown prevents from
ever running (armed timers, work still queued on the pool) get that hook
called instead, so no caller is left waiting.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional, Set

from realitydefender.integrations.event_loop import BackgroundLoop

logger = logging.getLogger(__name__)


class _Task:
    __slots__ = ("fn", "args", "on_cancel")

    def __init__(self, fn: Callable, args: tuple, on_cancel: Optional[Callable]):
        self.fn = fn
        self.args = args
        self.on_cancel = on_cancel

    def cancel(self) -> None:
        if self.on_cancel is None:
            logger.debug(f"[SCHEDULER] Dropping {getattr(self.fn, '__name__', self.fn)} after shutdown")
            return
        try:
            self.on_cancel(*self.args)
        except Exception as e:
            logger.error(f"[SCHEDULER] Cancellation hook raised: {e!r}")


class Scheduler:
    def __init__(self, loop: BackgroundLoop, max_workers: int = 2):
        self._loop = loop
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="realitydefender-scheduler"
        )
        self._lock = threading.Lock()
        self._closed = False
        self._armed: Set[_Task] = set()
        self._running: Dict[Future, _Task] = {}

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def schedule(self, delay: float, fn: Callable, *args, on_cancel: Optional[Callable] = None) -> None:
        """
        Run fn(*args) once after `delay` seconds. Raises RuntimeError once shut down.

        If shutdown keeps the task from running, on_cancel(*args) is called instead.
        """
        task = _Task(fn, args, on_cancel)
        with self._lock:
            if self._closed:
                raise RuntimeError("Scheduler is shut down")
            self._armed.add(task)
        try:
            self._loop.call_later(delay, self._dispatch, task)
        except RuntimeError:
            with self._lock:
                self._armed.discard(task)
            raise

    def execute(self, fn: Callable, *args, on_cancel: Optional[Callable] = None) -> None:
        self.schedule(0.0, fn, *args, on_cancel=on_cancel)

    def _dispatch(self, task: _Task) -> None:
        # Runs on the event loop thread: hand off, never block here.
        with self._lock:
            if task not in self._armed:
                # already cancelled by shutdown
                return
            self._armed.discard(task)
            future = self._executor.submit(task.fn, *task.args)
            self._running[future] = task
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            task = self._running.pop(future, None)
        if future.cancelled():
            if task is not None:
                task.cancel()
            return
        if future.exception() is not None:
            logger.error(f"[SCHEDULER] Scheduled task raised: {future.exception()!r}")

    def shutdown(self, grace: float = 5.0) -> None:
        """
        Stop accepting work, cancel armed timers and wait up to `grace` for
        running tasks. Queued work still pending after that is cancelled.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            armed = list(self._armed)
            self._armed.clear()
            running = list(self._running)

        if armed:
            logger.info(f"[SHUTDOWN] Cancelling {len(armed)} scheduled poll(s)")
            for task in armed:
                task.cancel()
        if running:
            _, not_done = wait(running, timeout=grace)
            if not_done:
                logger.warning(
                    f"[SHUTDOWN] {len(not_done)} scheduled task(s) still running after {grace}s, forcing stop"
                )
        self._executor.shutdown(wait=False, cancel_futures=True)
