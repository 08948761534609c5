from __future__ import annotations

import logging
import signal
import threading

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.2


class ShutdownSignal:
    """Process-wide stop flag. Setting it more than once is a no-op."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    def request(self, reason: str = "shutdown requested") -> bool:
        """Set the flag. Returns True only for the call that actually set it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
        logger.info("%s, shutting down...", reason)
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def sleep(self, seconds: float, step: float = POLL_INTERVAL_S) -> bool:
        """Sleep up to ``seconds`` in ``step`` chunks, waking early on shutdown.

        Returns True if shutdown was requested before the full duration passed.
        """
        slept = 0.0
        while slept < seconds:
            if self._event.is_set():
                return True
            chunk = min(step, seconds - slept)
            if self._event.wait(chunk):
                return True
            slept += chunk
        return self._event.is_set()


def install_signal_handlers(stop: ShutdownSignal) -> None:
    """Route Ctrl+C and SIGTERM to ``stop``. Must be called from the main thread."""

    def _handler(signum, _frame) -> None:
        name = signal.Signals(signum).name
        stop.request(f"{name} received")

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)
