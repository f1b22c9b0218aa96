"""
Test Resilient Fetcher - retries, timeouts and rate-limit handling

No network: the session is a Mock returning real requests.Response objects.
"""

import os
import sys
import time
import unittest
from email.utils import formatdate
from unittest.mock import Mock, call

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import requests

from src.coreutils.errors import TransportError
from src.coreutils.request import ResilientFetcher, new_session, parse_retry_after

URL = "https://games.roblox.com/v1/games?universeIds=1"


def make_response(status=200, body=b"{}", headers=None):
    response = requests.Response()
    response.status_code = status
    response._content = body
    response._content_consumed = True
    response.headers.update(headers or {})
    response.url = URL
    return response


class TestParseRetryAfter(unittest.TestCase):
    def test_delta_seconds(self):
        self.assertEqual(parse_retry_after("2"), 2.0)

    def test_http_date(self):
        value = formatdate(time.time() + 30, usegmt=True)
        seconds = parse_retry_after(value)
        self.assertGreater(seconds, 25)
        self.assertLessEqual(seconds, 30)

    def test_past_date_is_zero(self):
        self.assertEqual(parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT"), 0.0)

    def test_missing_or_invalid(self):
        self.assertIsNone(parse_retry_after(None))
        self.assertIsNone(parse_retry_after(""))
        self.assertIsNone(parse_retry_after("soon"))


class TestResilientFetcher(unittest.TestCase):
    def setUp(self):
        self.session = Mock()
        self.sleep = Mock()
        self.backoff = Mock(return_value=500.0)
        self.fetcher = ResilientFetcher(
            session=self.session,
            timeout=20.0,
            max_attempts=4,
            backoff=self.backoff,
            sleep=self.sleep,
        )

    def test_success_first_attempt(self):
        ok = make_response(200, b'{"data": []}')
        self.session.get.return_value = ok

        self.assertIs(self.fetcher.fetch(URL), ok)
        self.session.get.assert_called_once_with(URL, headers=None, timeout=20.0)
        self.sleep.assert_not_called()

    def test_429_honours_retry_after_seconds(self):
        """Retry-After: 2 delays the next attempt by 2 seconds"""
        ok = make_response(200)
        self.session.get.side_effect = [
            make_response(429, headers={"Retry-After": "2"}),
            ok,
        ]

        self.assertIs(self.fetcher.fetch(URL), ok)
        self.assertEqual(self.sleep.call_args_list, [call(2.0)])
        self.backoff.assert_not_called()

    def test_429_without_retry_after_uses_backoff(self):
        self.session.get.side_effect = [
            make_response(429),
            make_response(429, headers={"Retry-After": "later"}),
            make_response(200),
        ]

        self.assertEqual(self.fetcher.fetch(URL).status_code, 200)
        self.assertEqual(self.backoff.call_args_list, [call(1), call(2)])
        self.assertEqual(self.sleep.call_args_list, [call(0.5), call(0.5)])

    def test_5xx_retried_then_returned_when_exhausted(self):
        self.session.get.side_effect = [make_response(503) for _ in range(4)]

        response = self.fetcher.fetch(URL)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.session.get.call_count, 4)
        self.assertEqual(self.sleep.call_count, 3)

    def test_final_429_is_returned_not_raised(self):
        self.session.get.side_effect = [
            make_response(429, headers={"Retry-After": "1"}) for _ in range(4)
        ]

        self.assertEqual(self.fetcher.fetch(URL).status_code, 429)
        self.assertEqual(self.session.get.call_count, 4)

    def test_client_error_not_retried(self):
        self.session.get.return_value = make_response(404)

        self.assertEqual(self.fetcher.fetch(URL).status_code, 404)
        self.session.get.assert_called_once()
        self.sleep.assert_not_called()

    def test_timeout_then_success(self):
        self.session.get.side_effect = [requests.Timeout("read timed out"), make_response(200)]

        self.assertEqual(self.fetcher.fetch(URL).status_code, 200)
        self.assertEqual(self.sleep.call_args_list, [call(0.5)])

    def test_four_timeouts_raise_without_fifth_call(self):
        """The last transport error is raised instead of attempting again"""
        last = requests.Timeout("attempt 4")
        self.session.get.side_effect = [
            requests.Timeout("attempt 1"),
            requests.ConnectionError("attempt 2"),
            requests.Timeout("attempt 3"),
            last,
        ]

        with self.assertRaises(TransportError) as ctx:
            self.fetcher.fetch(URL)

        self.assertEqual(self.session.get.call_count, 4)
        self.assertEqual(self.sleep.call_count, 3)
        self.assertIs(ctx.exception.__cause__, last)
        self.assertEqual(ctx.exception.attempts, 4)

    def test_max_attempts_must_be_positive(self):
        with self.assertRaises(ValueError):
            ResilientFetcher(session=self.session, max_attempts=0)


class TestNewSession(unittest.TestCase):
    def test_default_headers(self):
        session = new_session()

        self.assertEqual(session.headers["Origin"], "null")
        self.assertEqual(session.headers["Accept"], "application/json")
        self.assertIn("pipe-roblox-games-to-json", session.headers["User-Agent"])


if __name__ == "__main__":
    unittest.main()
