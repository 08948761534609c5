from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from sitecheck.checks.results import CheckResult

logger = logging.getLogger(__name__)

CheckFn = Callable[[str], CheckResult]

# Marks a closed channel. Put once per worker on the job queue, and once on
# the result queue after the last worker exits.
_CLOSED = object()


class WorkerPool:
    """Fixed set of worker threads sharing one job queue and one result queue.

    ``checker_factory`` is called once inside each worker thread, so every
    worker owns its own checker (and HTTP session). If the returned checker
    has a ``close()`` method it is called when the worker exits.
    """

    def __init__(
        self,
        size: int,
        checker_factory: Callable[[], CheckFn],
        name: str = "sitecheck-worker",
    ) -> None:
        if size < 1:
            raise ValueError("worker pool needs at least one thread")
        self.size = size
        self._checker_factory = checker_factory
        self._name = name
        self._jobs: queue.Queue = queue.Queue()
        self._results: queue.Queue = queue.Queue()
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._alive = 0
        self._closed = False

    def start(self) -> None:
        with self._lock:
            if self._threads:
                raise RuntimeError("worker pool already started")
            self._alive = self.size
        for i in range(self.size):
            t = threading.Thread(
                target=self._work,
                name=f"{self._name}-{i}",
                daemon=True,
            )
            self._threads.append(t)
            t.start()
        logger.debug("Started %d workers", self.size)

    def submit(self, url: str) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("worker pool is closed")
            self._jobs.put(url)

    def get_result(self, timeout: float | None = None) -> CheckResult | None:
        """Block for the next result. Returns None once every worker has exited.

        Raises ``queue.Empty`` if ``timeout`` elapses first.
        """
        item = self._results.get(timeout=timeout)
        if item is _CLOSED:
            # keep the marker so later callers see the closed channel too
            self._results.put(_CLOSED)
            return None
        return item

    def close(self) -> None:
        """Stop accepting jobs. Workers finish what is queued, then exit."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for _ in range(self.size):
                self._jobs.put(_CLOSED)

    def join(self, timeout: float | None = None) -> None:
        for t in self._threads:
            t.join(timeout)

    @property
    def alive(self) -> int:
        with self._lock:
            return self._alive

    def _work(self) -> None:
        check = None
        try:
            check = self._checker_factory()
            while True:
                url = self._jobs.get()
                if url is _CLOSED:
                    break
                try:
                    result = check(url)
                except Exception as exc:
                    logger.exception("Unexpected error while checking %s", url)
                    result = CheckResult.failure(url, f"internal error: {exc}")
                self._results.put(result)
        finally:
            close = getattr(check, "close", None)
            if close is not None:
                close()
            with self._lock:
                self._alive -= 1
                last = self._alive == 0
            logger.debug("%s exited", threading.current_thread().name)
            if last:
                self._results.put(_CLOSED)
