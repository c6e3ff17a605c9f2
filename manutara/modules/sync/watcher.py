"""
Poll watcher.

An event channel fed by a polling loop. Consumers iterate over events()
until the watcher is stopped.
"""

import queue
import threading
from typing import Iterator

from .types import WatchEvent

_CLOSED = object()


class PollWatcher:
    """Event channel with idempotent close."""

    def __init__(self):
        self._events: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._stopped = False

    def send(self, event: WatchEvent) -> bool:
        """
        Queue an event for consumers.

        Returns:
            False if the watcher is already stopped and the event was dropped
        """
        with self._lock:
            if self._stopped:
                return False
            self._events.put(event)
            return True

    def stop(self) -> None:
        """Stop the watcher and close the event channel."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._events.put(_CLOSED)

    def is_stopped(self) -> bool:
        with self._lock:
            return self._stopped

    def events(self) -> Iterator[WatchEvent]:
        """Yield events in the order they were sent until the channel closes."""
        while True:
            event = self._events.get()
            if event is _CLOSED:
                return
            yield event
