"""Redis broker wrapper used by the worker loop."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from mcp_worker.config.settings import RedisSettings


class BrokerError(RuntimeError):
    """Raised when the broker cannot complete a request."""


class BrokerConnectionError(BrokerError):
    """Raised when the initial broker connection cannot be established."""


class BrokerOperationError(BrokerError):
    """Raised when a pop or write fails after startup."""


class RedisLikeClient(Protocol):
    async def ping(self) -> Any: ...
    async def blpop(self, keys: Sequence[str], timeout: int = 0) -> Any: ...
    async def setex(self, name: str, time: int, value: str) -> Any: ...
    async def aclose(self) -> Any: ...


def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class RedisBrokerClient:
    """Blocking pop and expiring writes over a redis connection."""

    def __init__(self, client: RedisLikeClient, *, owns_client: bool = False) -> None:
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def from_settings(cls, redis_settings: RedisSettings) -> "RedisBrokerClient":
        client = redis_asyncio.Redis.from_url(
            redis_settings.url,
            decode_responses=True,
            encoding_errors="replace",
        )
        return cls(client, owns_client=True)

    async def connect(self) -> None:
        """Verify the broker is reachable."""

        try:
            await self._client.ping()
        except (RedisError, OSError) as exc:
            raise BrokerConnectionError(f"failed to connect to redis: {exc}") from exc

    async def blocking_pop_any(
        self,
        queue_names: Sequence[str],
        *,
        timeout_seconds: int = 0,
    ) -> tuple[str, str] | None:
        """Pop the next item from the first non-empty queue.

        A ``timeout_seconds`` of 0 waits indefinitely. With a positive timeout
        ``None`` is returned when no queue produced an item in time.
        """

        if not queue_names:
            raise ValueError("queue_names must not be empty")
        try:
            popped = await self._client.blpop(list(queue_names), timeout=timeout_seconds)
        except (RedisError, OSError) as exc:
            raise BrokerOperationError(f"queue pop failed: {exc}") from exc
        if popped is None:
            return None
        queue_name, payload = popped
        return _as_text(queue_name), _as_text(payload)

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write ``value`` under ``key``, replacing any previous value."""

        try:
            await self._client.setex(key, ttl_seconds, value)
        except (RedisError, OSError) as exc:
            raise BrokerOperationError(f"write to {key} failed: {exc}") from exc

    async def aclose(self) -> None:
        """Close the underlying connection pool when owned by this wrapper."""

        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "BrokerConnectionError",
    "BrokerError",
    "BrokerOperationError",
    "RedisBrokerClient",
    "RedisLikeClient",
]
