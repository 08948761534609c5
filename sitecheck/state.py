from __future__ import annotations

import threading
from collections import deque
from dataclasses import asdict, dataclass, replace
from typing import Any

from sitecheck.checks.results import CheckResult


@dataclass
class UrlStats:
    url: str
    checks: int = 0
    successes: int = 0
    total_elapsed_s: float = 0.0
    last_ok: bool | None = None
    last_run: str | None = None
    last_status_code: int | None = None
    last_error: str | None = None

    def record(self, ok: bool, elapsed_s: float) -> None:
        self.checks += 1
        if ok:
            self.successes += 1
        self.total_elapsed_s += elapsed_s

    @property
    def uptime(self) -> float:
        if self.checks == 0:
            return 0.0
        return self.successes * 100.0 / self.checks

    @property
    def avg_ms(self) -> float:
        if self.checks == 0:
            return 0.0
        return self.total_elapsed_s * 1000.0 / self.checks

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["uptime"] = round(self.uptime, 1)
        d["avg_ms"] = round(self.avg_ms, 1)
        return d


class StatsStore:
    """Running per-URL counters across rounds.

    Only the scheduler thread calls ``record``; the lock exists so the status
    API can take consistent snapshots from another thread.
    """

    def __init__(self, max_recent: int = 500) -> None:
        self._stats: dict[str, UrlStats] = {}
        self._recent: deque[dict[str, Any]] = deque(maxlen=max_recent)
        self._lock = threading.Lock()

    def record(self, result: CheckResult) -> UrlStats:
        with self._lock:
            st = self._stats.get(result.url)
            if st is None:
                st = UrlStats(url=result.url)
                self._stats[result.url] = st
            record = result.to_dict()
            st.record(result.ok, result.elapsed_s)
            st.last_ok = result.ok
            st.last_run = record["timestamp"]
            st.last_status_code = result.status_code
            st.last_error = result.error
            self._recent.append(record)
            return st

    def get(self, url: str) -> UrlStats | None:
        """Copy of the current stats for ``url``, or None if never seen."""
        with self._lock:
            st = self._stats.get(url)
            return replace(st) if st is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._stats)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {url: st.to_dict() for url, st in self._stats.items()}

    def recent(self, limit: int = 50) -> list[dict[str, Any]]:
        with self._lock:
            items = list(self._recent)
        return list(reversed(items[-limit:]))

    def summary_lines(self) -> list[str]:
        with self._lock:
            return [
                f"{url} -> checks: {st.checks}, uptime: {st.uptime:.1f}%, "
                f"avg_rt_ms: {st.avg_ms:.1f}"
                for url, st in self._stats.items()
            ]
