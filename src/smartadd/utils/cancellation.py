"""Cooperative cancellation for smart selection runs."""

import threading
from typing import Callable, List


class CancellationToken:
    """A flag checked at suspension points; cancelling never interrupts work in flight.

    Thread-safe, since the scan step runs in a worker thread while the
    event loop may request cancellation.
    """

    def __init__(self):
        self._event = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register a callback, run immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()


class _NeverCancelled(CancellationToken):
    def cancel(self) -> None:
        raise RuntimeError("The NONE token cannot be cancelled")


# Shared token for callers that never cancel
NONE = _NeverCancelled()
