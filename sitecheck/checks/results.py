from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Attempt:
    """Outcome of a single fetch against a URL."""

    ok: bool
    elapsed_s: float
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class CheckResult:
    """Final outcome for one URL in one round, after retries."""

    url: str
    ok: bool
    elapsed_s: float
    status_code: int | None = None
    error: str | None = None
    observed_at: datetime = field(default_factory=utcnow)

    @classmethod
    def success(cls, url: str, status_code: int, elapsed_s: float) -> CheckResult:
        return cls(url=url, ok=True, elapsed_s=elapsed_s, status_code=status_code)

    @classmethod
    def failure(cls, url: str, error: str) -> CheckResult:
        return cls(url=url, ok=False, elapsed_s=0.0, error=error)

    @property
    def elapsed_ms(self) -> int:
        return int(self.elapsed_s * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "ok": self.ok,
            "status_code": self.status_code,
            "error": self.error,
            "response_time_ms": self.elapsed_ms,
            "timestamp": self.observed_at.isoformat().replace("+00:00", "Z"),
        }
