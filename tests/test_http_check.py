import unittest
from unittest.mock import Mock

import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import LocationParseError

from sitecheck.checks.http_check import MAX_REDIRECTS, build_session, fetch_once


def _response(status_code: int = 200, headers: dict | None = None, text: str = "") -> Mock:
    resp = Mock(status_code=status_code, text=text)
    resp.headers = CaseInsensitiveDict(headers or {})
    return resp


def _session(resp: Mock | None = None, exc: Exception | None = None) -> Mock:
    session = Mock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value = resp
    return session


class FetchOnceTests(unittest.TestCase):
    def test_success_with_matching_header_and_body(self) -> None:
        resp = _response(200, {"Server": "unit-test"}, "hello world")
        session = _session(resp)

        res = fetch_once(
            session,
            "http://example.local/ok",
            timeout_s=2,
            expected_headers=[("server", "unit-test")],
            contains="hello",
        )

        self.assertTrue(res.ok)
        self.assertEqual(res.status_code, 200)
        self.assertGreater(res.elapsed_s, 0)
        self.assertIsNone(res.error)
        session.get.assert_called_once_with(
            "http://example.local/ok", timeout=(2, 2), stream=True
        )
        resp.close.assert_called_once()

    def test_header_mismatch(self) -> None:
        resp = _response(200, {"Server": "unit-test"})

        res = fetch_once(
            _session(resp), "http://example.local/h", 2, [("Server", "expected")]
        )

        self.assertFalse(res.ok)
        self.assertEqual(
            res.error, "header mismatch: Server expected 'expected' got 'unit-test'"
        )
        resp.close.assert_called_once()

    def test_missing_header(self) -> None:
        resp = _response(200, {})

        res = fetch_once(_session(resp), "http://example.local/h", 2, [("X-Env", "prod")])

        self.assertFalse(res.ok)
        self.assertEqual(res.error, "missing required header: X-Env")

    def test_first_failing_header_short_circuits(self) -> None:
        resp = _response(200, {"A": "1"})

        res = fetch_once(
            _session(resp), "http://example.local/h", 2, [("B", "2"), ("A", "wrong")]
        )

        self.assertEqual(res.error, "missing required header: B")

    def test_body_missing_substring(self) -> None:
        resp = _response(200, text="foo bar baz")

        res = fetch_once(_session(resp), "http://example.local/b", 2, contains="nope")

        self.assertFalse(res.ok)
        self.assertIn("body validation failed", res.error)
        self.assertIn("'nope'", res.error)

    def test_body_not_read_without_substring_check(self) -> None:
        resp = _response(200)
        type(resp).text = property(lambda _self: self.fail("body was read"))

        res = fetch_once(_session(resp), "http://example.local/b", 2)

        self.assertTrue(res.ok)
        resp.close.assert_called_once()

    def test_body_read_error(self) -> None:
        resp = _response(200)

        def _boom(_self):
            raise requests.ConnectionError("reset by peer")

        type(resp).text = property(_boom)

        res = fetch_once(_session(resp), "http://example.local/b", 2, contains="x")

        self.assertFalse(res.ok)
        self.assertTrue(res.error.startswith("body read error:"))
        resp.close.assert_called_once()

    def test_timeout_is_request_error(self) -> None:
        session = _session(exc=requests.Timeout("read timed out"))

        res = fetch_once(session, "http://example.local/slow", 1)

        self.assertFalse(res.ok)
        self.assertEqual(res.error, "request error: read timed out")

    def test_unwrapped_urllib3_error_is_request_error(self) -> None:
        session = _session(exc=LocationParseError("a..b.example, label empty or too long"))

        res = fetch_once(session, "http://a..b.example/", 1)

        self.assertFalse(res.ok)
        self.assertTrue(res.error.startswith("request error:"))
        self.assertIn("a..b.example", res.error)

    def test_http_error_status_is_request_error(self) -> None:
        resp = _response(503)

        res = fetch_once(_session(resp), "http://example.local/down", 2)

        self.assertFalse(res.ok)
        self.assertEqual(res.error, "request error: http://example.local/down: status code 503")
        resp.close.assert_called_once()

    def test_build_session_limits_redirects(self) -> None:
        session = build_session()
        try:
            self.assertEqual(session.max_redirects, MAX_REDIRECTS)
        finally:
            session.close()


if __name__ == "__main__":
    unittest.main()
