"""
Tests for the bounded retry fetcher.

Verifies that:
- A 2xx response is returned without retry
- Non-2xx and transport errors are retried with a fixed delay
- The last failure is raised once the budget is spent
- Only transport failures are retried
"""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from btc_wallet_sync.core.errors import TransportError
from btc_wallet_sync.providers.resilience import BoundedRetryFetcher, RetryConfig, retry_call
from tests.fakes import FakeSession, make_response

URL = "https://example.test/api/thing"


def _fetcher(session, attempts: int = 3, delay: float = 1.0):
    sleeps: list = []
    fetcher = BoundedRetryFetcher(
        session=session,
        retry_config=RetryConfig(attempts=attempts, delay_s=delay),
        sleep=sleeps.append,
    )
    return fetcher, sleeps


class TestBoundedRetryFetcher:
    def test_success_first_attempt(self):
        session = FakeSession({"/thing": {"ok": True}})
        fetcher, sleeps = _fetcher(session)

        assert fetcher.fetch_json(URL) == {"ok": True}
        assert len(session.calls) == 1
        assert sleeps == []

    def test_retries_then_succeeds(self):
        session = FakeSession({"/thing": [(503, None), (502, None), {"ok": True}]})
        fetcher, sleeps = _fetcher(session)

        assert fetcher.fetch_json(URL) == {"ok": True}
        assert len(session.calls) == 3
        assert sleeps == [1.0, 1.0]

    def test_exhausts_budget_and_raises_last_error(self):
        session = FakeSession({"/thing": (500, None)})
        fetcher, sleeps = _fetcher(session)

        with pytest.raises(TransportError, match="status: 500") as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.status_code == 500
        assert len(session.calls) == 3
        # No delay after the final attempt.
        assert sleeps == [1.0, 1.0]

    def test_single_attempt_fails_immediately(self):
        session = FakeSession({"/thing": (500, None)})
        fetcher, sleeps = _fetcher(session, attempts=1)

        with pytest.raises(TransportError):
            fetcher.fetch(URL)
        assert len(session.calls) == 1
        assert sleeps == []

    def test_per_call_attempt_override(self):
        session = FakeSession({"/thing": (500, None)})
        fetcher, sleeps = _fetcher(session, attempts=3)

        with pytest.raises(TransportError):
            fetcher.fetch(URL, attempts=2)
        assert len(session.calls) == 2
        assert sleeps == [1.0]

    def test_client_error_status_is_a_failure(self):
        session = FakeSession({"/thing": (404, {"error": "nope"})})
        fetcher, _ = _fetcher(session, attempts=2)

        with pytest.raises(TransportError, match="404"):
            fetcher.fetch(URL)
        assert len(session.calls) == 2

    def test_transport_exception_wrapped(self):
        session = FakeSession({"/thing": [requests.ConnectionError("reset"), {"ok": 1}]})
        fetcher, sleeps = _fetcher(session)

        assert fetcher.fetch_json(URL) == {"ok": 1}
        assert sleeps == [1.0]

    def test_transport_exception_after_budget(self):
        session = FakeSession({"/thing": requests.Timeout("slow")})
        fetcher, _ = _fetcher(session, attempts=2)

        with pytest.raises(TransportError, match="Timeout"):
            fetcher.fetch(URL)

    def test_sends_accept_json_header(self):
        session = MagicMock()
        session.get.return_value = make_response(200, {})
        fetcher, _ = _fetcher(session)

        fetcher.fetch(URL, params={"a": "b"})
        _, kwargs = session.get.call_args
        assert kwargs["headers"] == {"Accept": "application/json"}
        assert kwargs["params"] == {"a": "b"}

    def test_invalid_json_is_transport_error(self):
        session = MagicMock()
        resp = make_response(200)
        resp.json.side_effect = ValueError("Expecting value")
        session.get.return_value = resp
        fetcher, _ = _fetcher(session)

        with pytest.raises(TransportError, match="Invalid JSON"):
            fetcher.fetch_json(URL)


class TestRetryCall:
    def test_non_transport_errors_are_not_retried(self):
        calls = []

        def boom():
            calls.append(1)
            raise ValueError("bad payload")

        with pytest.raises(ValueError):
            retry_call(boom, retry_config=RetryConfig(attempts=3, delay_s=0), sleep=lambda s: None)
        assert len(calls) == 1

    def test_delay_is_constant(self):
        sleeps: list = []

        def always_fail():
            raise TransportError("down")

        with pytest.raises(TransportError):
            retry_call(always_fail, retry_config=RetryConfig(attempts=4, delay_s=1.0), sleep=sleeps.append)
        assert sleeps == [1.0, 1.0, 1.0]

    def test_invalid_budget_rejected(self):
        with pytest.raises(ValueError):
            RetryConfig(attempts=0)
