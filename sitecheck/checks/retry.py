from __future__ import annotations

import logging
import time
from typing import Iterable

import requests

from sitecheck.checks.http_check import build_session, fetch_once
from sitecheck.checks.results import CheckResult
from sitecheck.models import Config

logger = logging.getLogger(__name__)

BACKOFF_STEP_S = 0.2


def backoff_delay(attempt: int) -> float:
    """Linear backoff: 0.2s after the first failure, 0.4s after the second, ..."""
    return BACKOFF_STEP_S * (attempt + 1)


def run_with_retries(
    session: requests.Session,
    url: str,
    max_retries: int,
    timeout_s: float,
    expected_headers: Iterable[tuple[str, str]] = (),
    contains: str | None = None,
) -> CheckResult:
    expected_headers = tuple(expected_headers)
    last_error: str | None = None

    for attempt in range(max_retries + 1):
        res = fetch_once(session, url, timeout_s, expected_headers, contains)
        if res.ok:
            return CheckResult.success(url, res.status_code, res.elapsed_s)

        last_error = res.error
        if attempt < max_retries:
            delay = backoff_delay(attempt)
            logger.debug(
                "Attempt %d for %s failed (%s); retrying in %.1fs",
                attempt + 1,
                url,
                last_error,
                delay,
            )
            time.sleep(delay)

    logger.info("Check failed for %s: %s", url, last_error)
    return CheckResult.failure(url, last_error or "unknown error")


class Checker:
    """Per-worker callable bound to its own HTTP session and the run's Config."""

    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self.session = build_session()

    def __call__(self, url: str) -> CheckResult:
        return run_with_retries(
            self.session,
            url,
            max_retries=self.cfg.max_retries,
            timeout_s=self.cfg.timeout_s,
            expected_headers=self.cfg.headers,
            contains=self.cfg.contains,
        )

    def close(self) -> None:
        self.session.close()
