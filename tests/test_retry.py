import unittest
from unittest.mock import Mock, call, patch

from urllib3.exceptions import LocationParseError

from sitecheck.checks.results import Attempt
from sitecheck.checks.retry import Checker, backoff_delay, run_with_retries
from sitecheck.models import Config


def _fail(error: str) -> Attempt:
    return Attempt(ok=False, elapsed_s=0.05, error=error)


class RetryPolicyTests(unittest.TestCase):
    def test_backoff_is_linear(self) -> None:
        self.assertAlmostEqual(backoff_delay(0), 0.2)
        self.assertAlmostEqual(backoff_delay(1), 0.4)
        self.assertAlmostEqual(backoff_delay(4), 1.0)

    def test_first_success_returns_immediately(self) -> None:
        ok = Attempt(ok=True, elapsed_s=0.123, status_code=204)
        with patch("sitecheck.checks.retry.fetch_once", return_value=ok) as fetch, patch(
            "sitecheck.checks.retry.time.sleep"
        ) as sleep:
            res = run_with_retries(Mock(), "http://a.local", max_retries=3, timeout_s=1)

        self.assertTrue(res.ok)
        self.assertEqual(res.status_code, 204)
        self.assertEqual(res.elapsed_s, 0.123)
        fetch.assert_called_once()
        sleep.assert_not_called()

    def test_success_after_failures_uses_successful_attempt_timing(self) -> None:
        attempts = [_fail("request error: a"), Attempt(ok=True, elapsed_s=0.5, status_code=200)]
        with patch("sitecheck.checks.retry.fetch_once", side_effect=attempts), patch(
            "sitecheck.checks.retry.time.sleep"
        ) as sleep:
            res = run_with_retries(Mock(), "http://a.local", max_retries=2, timeout_s=1)

        self.assertTrue(res.ok)
        self.assertEqual(res.elapsed_s, 0.5)
        sleep.assert_called_once_with(0.2)

    def test_all_attempts_fail_reports_last_error_and_zero_elapsed(self) -> None:
        attempts = [
            _fail("request error: first"),
            _fail("missing required header: X"),
            _fail("body validation failed: missing substring 'z'"),
        ]
        with patch("sitecheck.checks.retry.fetch_once", side_effect=attempts) as fetch, patch(
            "sitecheck.checks.retry.time.sleep"
        ) as sleep:
            res = run_with_retries(Mock(), "http://a.local", max_retries=2, timeout_s=1)

        self.assertFalse(res.ok)
        self.assertEqual(res.error, "body validation failed: missing substring 'z'")
        self.assertEqual(res.elapsed_s, 0.0)
        self.assertIsNotNone(res.observed_at)
        self.assertEqual(fetch.call_count, 3)
        # no sleep after the final attempt
        self.assertEqual(sleep.call_args_list, [call(0.2), call(0.4)])

    def test_zero_retries_means_single_attempt(self) -> None:
        with patch(
            "sitecheck.checks.retry.fetch_once", return_value=_fail("request error: x")
        ) as fetch, patch("sitecheck.checks.retry.time.sleep") as sleep:
            res = run_with_retries(Mock(), "http://a.local", max_retries=0, timeout_s=1)

        self.assertFalse(res.ok)
        fetch.assert_called_once()
        sleep.assert_not_called()

    def test_malformed_host_is_retried_as_request_error(self) -> None:
        session = Mock()
        session.get.side_effect = LocationParseError("a..b.example, label empty or too long")
        with patch("sitecheck.checks.retry.time.sleep") as sleep:
            res = run_with_retries(session, "http://a..b.example/", max_retries=2, timeout_s=1)

        self.assertFalse(res.ok)
        self.assertTrue(res.error.startswith("request error:"))
        self.assertEqual(session.get.call_count, 3)
        self.assertEqual(sleep.call_args_list, [call(0.2), call(0.4)])

    def test_checker_passes_config_through(self) -> None:
        cfg = Config(
            timeout_s=3,
            max_retries=4,
            headers=(("Server", "nginx"),),
            contains="Welcome",
            urls=("http://a.local",),
        )
        with patch("sitecheck.checks.retry.run_with_retries") as run:
            checker = Checker(cfg)
            checker("http://a.local")
            checker.close()

        run.assert_called_once_with(
            checker.session,
            "http://a.local",
            max_retries=4,
            timeout_s=3,
            expected_headers=(("Server", "nginx"),),
            contains="Welcome",
        )


if __name__ == "__main__":
    unittest.main()
