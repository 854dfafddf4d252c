"""
Background asyncio event loop on a daemon thread.

The HTTP transport is aiohttp, which needs a running loop. Synchronous
SDK calls hand their coroutines to this loop via `run()`; the scheduler
uses `call_later()` for its timers. One loop per client, stopped by
`RealityDefender.close()`.
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class BackgroundLoop:
    def __init__(self, name: str = "realitydefender-io"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._loop.is_closed()

    def run(self, coro: Awaitable, timeout: Optional[float] = None) -> Any:
        """Run a coroutine on the loop and block the calling thread for its result."""
        if not self.is_running:
            coro.close()
            raise RuntimeError("Event loop is not running")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise

    def call_later(self, delay: float, callback: Callable, *args) -> None:
        """Arm a one-shot timer on the loop. Safe to call from any thread."""
        if not self.is_running:
            raise RuntimeError("Event loop is not running")
        self._loop.call_soon_threadsafe(self._loop.call_later, max(delay, 0.0), callback, *args)

    def stop(self, grace: float = 5.0) -> None:
        """Stop the loop and join its thread, giving up after `grace` seconds."""
        if self._loop.is_closed():
            return
        if self._thread.is_alive():
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(grace)

        if self._thread.is_alive():
            logger.warning(f"[SHUTDOWN] Event loop thread still alive after {grace}s, abandoning it")
            return

        pending = asyncio.all_tasks(self._loop)
        for task in pending:
            task.cancel()
        if pending:
            logger.info(f"[SHUTDOWN] Cancelled {len(pending)} pending I/O tasks")
            self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        self._loop.close()
        logger.info("[SHUTDOWN] Event loop closed")
