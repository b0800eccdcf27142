"""
redis_client.py – lazy Redis connection with bounded retry
==========================================================

• Lazy: the first attribute access triggers connect + PING.
• Unlike a background worker, the bot must not run a trading loop
  without durable backing, so connecting gives up after
  `attempts` tries and raises `StoreUnavailable`.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import redis

from .logging import get_logger

log = get_logger("shared.redis")


class StoreUnavailable(RuntimeError):
    """Redis could not be reached at startup."""


class LazyRedis:
    """Proxy object that connects on first attribute access."""

    def __init__(self, url: str, attempts: int = 5, delay: float = 2.0) -> None:
        self.url = url
        self.attempts = attempts
        self.delay = delay
        self._client: Optional[redis.Redis] = None

    def __getattr__(self, name: str) -> Callable[..., Any]:  # noqa: D401
        if self._client is None:
            self._connect()
        return getattr(self._client, name)

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _connect(self) -> None:
        last_exc: Exception | None = None
        for attempt in range(1, self.attempts + 1):
            try:
                client = redis.Redis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_timeout=2,
                )
                client.ping()
                self._client = client
                log.info("Connected to Redis at %s", self.url)
                return
            except redis.RedisError as exc:
                last_exc = exc
                log.warning("Redis unavailable (%d/%d) – %s",
                            attempt, self.attempts, exc)
                if attempt < self.attempts:
                    time.sleep(self.delay)
        raise StoreUnavailable(f"cannot reach Redis at {self.url}: {last_exc}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            log.info("Redis connection closed")


def connect(url: str, attempts: int = 5, delay: float = 2.0) -> LazyRedis:
    """Return a connected proxy; raises `StoreUnavailable` when Redis is down."""
    rds = LazyRedis(url, attempts=attempts, delay=delay)
    rds.ping()
    return rds
