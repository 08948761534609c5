from __future__ import annotations

import time
from typing import Iterable

import requests
import urllib3

from sitecheck.checks.results import Attempt

MAX_REDIRECTS = 2

# requests lets some urllib3 errors (e.g. LocationParseError) escape unwrapped
TRANSPORT_ERRORS = (requests.RequestException, urllib3.exceptions.HTTPError)


def build_session() -> requests.Session:
    """One session per worker thread; sessions are not shared across threads."""
    session = requests.Session()
    session.max_redirects = MAX_REDIRECTS
    return session


def _failed(start: float, error: str) -> Attempt:
    return Attempt(ok=False, elapsed_s=time.perf_counter() - start, error=error)


def _check_headers(
    resp: requests.Response, expected_headers: Iterable[tuple[str, str]]
) -> str | None:
    # resp.headers is a CaseInsensitiveDict
    for name, expected in expected_headers:
        got = resp.headers.get(name)
        if got is None:
            return f"missing required header: {name}"
        if got != expected:
            return f"header mismatch: {name} expected '{expected}' got '{got}'"
    return None


def fetch_once(
    session: requests.Session,
    url: str,
    timeout_s: float,
    expected_headers: Iterable[tuple[str, str]] = (),
    contains: str | None = None,
) -> Attempt:
    start = time.perf_counter()
    try:
        resp = session.get(url, timeout=(timeout_s, timeout_s), stream=True)
    except TRANSPORT_ERRORS as e:
        return _failed(start, f"request error: {e}")

    try:
        if resp.status_code >= 400:
            return _failed(start, f"request error: {url}: status code {resp.status_code}")

        error = _check_headers(resp, expected_headers)
        if error is not None:
            return _failed(start, error)

        if contains is not None:
            try:
                body = resp.text
            except TRANSPORT_ERRORS as e:
                return _failed(start, f"body read error: {e}")
            if contains not in body:
                return _failed(start, f"body validation failed: missing substring '{contains}'")

        return Attempt(
            ok=True,
            elapsed_s=time.perf_counter() - start,
            status_code=resp.status_code,
        )
    finally:
        resp.close()
