from __future__ import annotations

import logging
import threading

import uvicorn
from fastapi import FastAPI, Query

from sitecheck.api_schemas import (
    CheckResultResponse,
    HealthResponse,
    RoundResponse,
    UrlStatsResponse,
)
from sitecheck.runner import RoundScheduler
from sitecheck.state import StatsStore

logger = logging.getLogger(__name__)


def create_app(stats: StatsStore, scheduler: RoundScheduler | None = None) -> FastAPI:
    app = FastAPI(
        title="sitecheck",
        version="1.0.0",
        description=(
            "Read-only view of a running sitecheck monitor: per-URL uptime and "
            "latency, plus the most recent check results."
        ),
    )

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["system"],
        summary="Health Check",
        description="Liveness endpoint used by probes and orchestration.",
    )
    def health():
        return {"status": "ok"}

    @app.get(
        "/api/stats",
        response_model=dict[str, UrlStatsResponse],
        tags=["status"],
        summary="Per-URL Stats",
        description="Running counters per URL across all rounds so far.",
    )
    def url_stats():
        return stats.snapshot()

    @app.get(
        "/api/results",
        response_model=list[CheckResultResponse],
        tags=["status"],
        summary="Recent Results",
        description="Most recent check results, newest first.",
    )
    def recent_results(
        limit: int = Query(default=50, ge=1, le=500, description="Max number of results to return")
    ):
        return stats.recent(limit=limit)

    @app.get(
        "/api/rounds",
        response_model=RoundResponse,
        tags=["status"],
        summary="Scheduler State",
        description="Current round number and scheduler state.",
    )
    def rounds():
        if scheduler is None:
            return {"round": 0, "state": "idle", "urls": 0, "period_s": None}
        return {
            "round": scheduler.round,
            "state": scheduler.state.value,
            "urls": len(scheduler.cfg.urls),
            "period_s": scheduler.cfg.period_s,
        }

    return app


def serve_in_background(app: FastAPI, host: str, port: int) -> uvicorn.Server:
    """Start uvicorn on a daemon thread. Call ``server.should_exit = True`` to stop it."""
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="warning"))
    t = threading.Thread(target=server.run, name="sitecheck-api", daemon=True)
    t.start()
    logger.info("Status API listening on http://%s:%d", host, port)
    return server
