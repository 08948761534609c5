from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Health status")


class UrlStatsResponse(BaseModel):
    url: str
    checks: int = Field(ge=0)
    successes: int = Field(ge=0)
    total_elapsed_s: float = Field(ge=0)
    uptime: float = Field(ge=0, le=100, description="Percent of checks that succeeded")
    avg_ms: float = Field(ge=0, description="Mean response time in milliseconds")
    last_ok: bool | None = None
    last_run: str | None = None
    last_status_code: int | None = None
    last_error: str | None = None


class CheckResultResponse(BaseModel):
    url: str
    ok: bool
    status_code: int | None = None
    error: str | None = None
    response_time_ms: int = Field(ge=0)
    timestamp: str


class RoundResponse(BaseModel):
    round: int = Field(ge=0)
    state: str
    urls: int = Field(ge=0)
    period_s: float | None = None
