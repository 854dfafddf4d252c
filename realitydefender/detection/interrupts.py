"""
Wake-up registry for sleeping polls.

Every blocking poll registers the event it sleeps on for as long as it
runs. `interrupt()` sets the events registered at that moment and nothing
else, so polls started afterwards run normally. `close()` is terminal:
polls registered after it start out interrupted.

A caller-supplied cancel event is registered as is, which lets one event
be cancelled by either its owner or the engine.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional


class Interrupter:
    def __init__(self):
        self._lock = threading.Lock()
        self._active: List[threading.Event] = []
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @contextmanager
    def track(self, cancel_event: Optional[threading.Event] = None) -> Iterator[threading.Event]:
        """Register the event one poll sleeps on; yields it."""
        event = cancel_event or threading.Event()
        with self._lock:
            if self._closed:
                event.set()
            self._active.append(event)
        try:
            yield event
        finally:
            with self._lock:
                self._active.remove(event)

    def interrupt(self) -> int:
        """Wake every poll currently registered. Returns how many were woken."""
        with self._lock:
            events = list(self._active)
        for event in events:
            event.set()
        return len(events)

    def close(self) -> int:
        with self._lock:
            self._closed = True
        return self.interrupt()
