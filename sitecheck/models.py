from __future__ import annotations

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class Config(BaseModel):
    """Everything one monitoring run needs. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    worker_threads: int = Field(default=50, ge=1)
    timeout_s: float = Field(default=5.0, gt=0)
    max_retries: int = Field(default=1, ge=0)
    period_s: Optional[float] = Field(default=None, gt=0)
    headers: Tuple[Tuple[str, str], ...] = ()
    contains: Optional[str] = None
    urls: Tuple[str, ...] = ()

    @property
    def run_once(self) -> bool:
        return self.period_s is None
