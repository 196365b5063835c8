from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60
DAY_SECONDS = 24 * 60 * 60


@dataclass
class RateLimitEntry:
    minute_count: int
    minute_reset_time: float
    daily_count: int
    daily_reset_time: float


class RemainingQuota(BaseModel):
    minute: int
    daily: int


class RateLimitDecision(BaseModel):
    allowed: bool
    retry_after_seconds: int | None = None
    message: str | None = None
    remaining: RemainingQuota | None = None


def _plural(n: int) -> str:
    return "" if n == 1 else "s"


class RateLimiter:
    """Per-client fixed-window limiter with a burst (minute) and a daily cap.

    Windows reset lazily: an expired window is only rolled over when the next
    request from that client arrives. Entries idle for a full day past their
    daily window are dropped by ``cleanup_expired``.
    """

    def __init__(
        self,
        minute_limit: int = 2,
        daily_limit: int = 30,
        minute_window: float = MINUTE_SECONDS,
        daily_window: float = DAY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.minute_limit = minute_limit
        self.daily_limit = daily_limit
        self.minute_window = minute_window
        self.daily_window = daily_window
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def check(self, client_key: str) -> RateLimitDecision:
        with self._lock:
            now = self._clock()
            entry = self._entries.get(client_key)
            if entry is None:
                entry = RateLimitEntry(
                    minute_count=0,
                    minute_reset_time=now + self.minute_window,
                    daily_count=0,
                    daily_reset_time=now + self.daily_window,
                )
                self._entries[client_key] = entry

            if now > entry.minute_reset_time:
                entry.minute_count = 0
                entry.minute_reset_time = now + self.minute_window

            if now > entry.daily_reset_time:
                entry.daily_count = 0
                entry.daily_reset_time = now + self.daily_window

            # Daily cap wins over the minute window once saturated.
            if entry.daily_count >= self.daily_limit:
                retry_after = max(1, math.ceil(entry.daily_reset_time - now))
                hours_left = math.ceil(retry_after / 3600)
                logger.info("Daily analysis limit hit for %s (retry in %ss)", client_key, retry_after)
                return RateLimitDecision(
                    allowed=False,
                    retry_after_seconds=retry_after,
                    message=(
                        f"Daily limit reached ({self.daily_limit} analyses per day). "
                        f"Please try again in {hours_left} hour{_plural(hours_left)}."
                    ),
                )

            if entry.minute_count >= self.minute_limit:
                retry_after = max(1, math.ceil(entry.minute_reset_time - now))
                logger.info("Burst limit hit for %s (retry in %ss)", client_key, retry_after)
                return RateLimitDecision(
                    allowed=False,
                    retry_after_seconds=retry_after,
                    message=(
                        f"Too many requests. Please wait {retry_after} second{_plural(retry_after)} "
                        "before trying again."
                    ),
                )

            entry.minute_count += 1
            entry.daily_count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=RemainingQuota(
                    minute=self.minute_limit - entry.minute_count,
                    daily=self.daily_limit - entry.daily_count,
                ),
            )

    def cleanup_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [
                key for key, entry in self._entries.items() if now > entry.daily_reset_time + self.daily_window
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Dropped %d idle rate-limit entries", len(stale))
        return len(stale)
