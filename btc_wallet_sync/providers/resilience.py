"""
Resilience primitives: bounded retry with a fixed delay, and the HTTP fetcher built on it.

Every provider request goes through BoundedRetryFetcher. Failures are only
logged at debug level here; reporting is the chain's job.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from ..core.errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY_S = 1.0
DEFAULT_HEADERS = {"Accept": "application/json"}


@dataclass(frozen=True)
class RetryConfig:
    """Fixed-delay retry budget. No backoff, no jitter."""

    attempts: int = DEFAULT_ATTEMPTS
    delay_s: float = DEFAULT_DELAY_S

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")
        if self.delay_s < 0:
            raise ValueError(f"delay_s must be >= 0, got {self.delay_s}")


def retry_call(
    func: Callable[..., T],
    *args: Any,
    retry_config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: tuple = (TransportError,),
    **kwargs: Any,
) -> T:
    """
    Call func until it succeeds or the attempt budget is spent.

    Only exceptions in retry_on are retried; the last one is re-raised once
    a single attempt remains. Waits retry_config.delay_s between attempts.
    """
    cfg = retry_config or RetryConfig()
    remaining = cfg.attempts
    while True:
        try:
            return func(*args, **kwargs)
        except retry_on as exc:
            logger.debug(
                "Attempt %d/%d failed: %s: %s",
                cfg.attempts - remaining + 1, cfg.attempts, type(exc).__name__, exc,
            )
            if remaining == 1:
                raise
            remaining -= 1
            sleep(cfg.delay_s)


class BoundedRetryFetcher:
    """
    GET JSON endpoints with a fixed-delay retry budget.

    A non-2xx status or any requests exception is a TransportError. The
    session and sleep function are injectable so tests never touch the network
    or the wall clock.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
        timeout_s: float = 15.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self.retry_config = retry_config or RetryConfig()
        self._timeout_s = timeout_s
        self._sleep = sleep

    def fetch(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        attempts: Optional[int] = None,
    ) -> requests.Response:
        cfg = self.retry_config
        if attempts is not None:
            cfg = RetryConfig(attempts=attempts, delay_s=cfg.delay_s)
        return retry_call(self._get_once, url, params, retry_config=cfg, sleep=self._sleep)

    def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Fetch and decode; a body that is not JSON counts as a transport failure."""
        resp = self.fetch(url, params)
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON from {url}: {exc}", url=url) from exc

    def _get_once(self, url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
        try:
            resp = self._session.get(url, params=params, headers=DEFAULT_HEADERS, timeout=self._timeout_s)
        except requests.RequestException as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}", url=url) from exc
        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"HTTP error! status: {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )
        return resp
