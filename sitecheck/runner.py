from __future__ import annotations

import enum
import logging
from typing import Callable

from sitecheck.checks.results import CheckResult
from sitecheck.models import Config
from sitecheck.pool import WorkerPool
from sitecheck.shutdown import POLL_INTERVAL_S, ShutdownSignal
from sitecheck.state import StatsStore

logger = logging.getLogger(__name__)

ResultSink = Callable[[CheckResult], None]
SummarySink = Callable[[StatsStore], None]


class RoundState(str, enum.Enum):
    IDLE = "idle"
    ENQUEUING = "enqueuing"
    COLLECTING = "collecting"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"


class RoundScheduler:
    """Drives rounds: enqueue every URL, collect one result per job, sleep, repeat."""

    def __init__(
        self,
        cfg: Config,
        pool: WorkerPool,
        stats: StatsStore,
        stop: ShutdownSignal,
        on_result: ResultSink | None = None,
        on_summary: SummarySink | None = None,
    ) -> None:
        self.cfg = cfg
        self.pool = pool
        self.stats = stats
        self.stop = stop
        self.on_result = on_result
        self.on_summary = on_summary
        self.round = 0
        self.state = RoundState.IDLE

    def _enqueue(self) -> int:
        self.state = RoundState.ENQUEUING
        submitted = 0
        for url in self.cfg.urls:
            if self.stop.is_set():
                logger.info(
                    "Shutdown during enqueue; round %d submitted %d/%d jobs",
                    self.round,
                    submitted,
                    len(self.cfg.urls),
                )
                break
            self.pool.submit(url)
            submitted += 1
        return submitted

    def _collect(self, expected: int) -> int:
        self.state = RoundState.COLLECTING
        received = 0
        for _ in range(expected):
            result = self.pool.get_result()
            if result is None:
                logger.warning(
                    "Result channel closed early; round %d got %d/%d results",
                    self.round,
                    received,
                    expected,
                )
                break
            received += 1
            if self.on_result is not None:
                self.on_result(result)
            self.stats.record(result)
        return received

    def run_round(self) -> int:
        """Run one round. Returns the number of results collected."""
        self.round += 1
        logger.info("Round %d: checking %d URLs", self.round, len(self.cfg.urls))
        submitted = self._enqueue()
        received = self._collect(submitted)
        if self.on_summary is not None:
            self.on_summary(self.stats)
        logger.info("Round %d done: %d results", self.round, received)
        return received

    def run(self) -> None:
        try:
            while not self.stop.is_set():
                self.run_round()
                if self.cfg.period_s is None:
                    break
                self.state = RoundState.SLEEPING
                if self.stop.sleep(self.cfg.period_s, step=POLL_INTERVAL_S):
                    break
        finally:
            self.state = RoundState.TERMINATED


def shutdown_pool(pool: WorkerPool) -> None:
    """Close the job queue, let workers drain it, and join them."""
    pool.close()
    pool.join()
    logger.info("Workers joined")
