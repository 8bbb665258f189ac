"""Retry and rate limiting helpers shared by the remote model clients."""

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Mapping

import httpx

RETRIABLE_STATUS = frozenset({408, 409, 429})
# Server errors that will not change on retry.
NON_RETRIABLE_SERVER_STATUS = frozenset({501, 505})


class RateLimiter:
    """Simple rate limiter that enforces a minimum interval between requests."""

    def __init__(
        self,
        *,
        min_interval_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval_seconds = max(0.0, min_interval_seconds)
        self._sleep = sleep
        self._now = now
        self._last_request_at: float | None = None
        self._lock = threading.Lock()

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval_seconds

    def acquire(self) -> None:
        if self._min_interval_seconds <= 0:
            return

        with self._lock:
            current = self._now()
            if self._last_request_at is not None:
                elapsed = current - self._last_request_at
                remaining = self._min_interval_seconds - elapsed
                if remaining > 0:
                    self._sleep(remaining)
                    current = self._now()

            self._last_request_at = current

    @classmethod
    def per_minute(
        cls,
        requests_per_minute: int | None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], float] = time.monotonic,
    ) -> "RateLimiter":
        if requests_per_minute is None or requests_per_minute <= 0:
            interval = 0.0
        else:
            interval = 60.0 / requests_per_minute
        return cls(min_interval_seconds=interval, sleep=sleep, now=now)


def is_retriable_status(status: int | None) -> bool:
    if status is None:
        return False
    if 500 <= status < 600:
        return status not in NON_RETRIABLE_SERVER_STATUS
    return status in RETRIABLE_STATUS


def select_retry_delay(
    *,
    attempt: int,
    backoff_seconds: float,
    max_backoff_seconds: float | None,
    response: httpx.Response | None,
) -> float:
    """Exponential backoff, stretched by Retry-After and capped when configured."""
    delay = backoff_seconds * (2 ** (attempt - 1))
    retry_after = (
        parse_retry_after_seconds(response.headers) if response is not None else None
    )
    if retry_after is not None:
        delay = max(delay, retry_after)
    if max_backoff_seconds is not None:
        delay = min(delay, max_backoff_seconds)
    return delay


def parse_retry_after_seconds(headers: Mapping[str, str]) -> float | None:
    raw_value = headers.get("Retry-After")
    if not raw_value:
        return None

    value = raw_value.strip()
    try:
        seconds = float(value)
    except ValueError:
        return _parse_retry_after_date(value)

    if seconds < 0:
        return None
    return seconds


def _parse_retry_after_date(value: str) -> float | None:
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    delta = (parsed - datetime.now(timezone.utc)).total_seconds()
    if delta <= 0:
        return None
    return delta


__all__ = [
    "RETRIABLE_STATUS",
    "RateLimiter",
    "is_retriable_status",
    "parse_retry_after_seconds",
    "select_retry_delay",
]
