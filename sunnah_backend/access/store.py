"""Rate limit counter storage."""

import json
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

KEY_PREFIX = "rate-limit:"


class RateLimitStoreError(Exception):
    """Raised when the counter store cannot be read or written."""


class RateLimitRecord(BaseModel):
    """Requests counted for one client within the current window."""

    count: int = Field(..., ge=1)
    timestamp: int = Field(..., description="Window start, unix seconds")

    def is_expired(self, now: int, window: int) -> bool:
        return now - self.timestamp > window

    def retry_after(self, now: int, window: int) -> int:
        """Seconds until the window that started at ``timestamp`` ends, at least 1.

        A record refreshed late in its window is still stored at exactly
        ``timestamp + window``; clients are then told to wait one second.
        """
        return max(1, window - (now - self.timestamp))


def rate_limit_key(fingerprint: str) -> str:
    return f"{KEY_PREFIX}{fingerprint}"


class RateLimitStore(Protocol):
    """Key-value store holding one RateLimitRecord per client."""

    async def get(self, key: str) -> RateLimitRecord | None: ...

    async def put(self, key: str, record: RateLimitRecord, ttl: int) -> None: ...


class RedisRateLimitStore:
    """RateLimitStore backed by Redis string keys with expiry.

    Records are stored as ``{"count": int, "timestamp": int}`` JSON. Every
    write resets the key's TTL.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def get(self, key: str) -> RateLimitRecord | None:
        try:
            raw = await self._redis.get(key)
        except (RedisError, OSError) as e:
            raise RateLimitStoreError(f"Failed to read {key}: {e}") from e

        if raw is None:
            return None

        try:
            return RateLimitRecord.model_validate_json(raw)
        except ValidationError as e:
            raise RateLimitStoreError(f"Malformed rate limit record at {key}") from e

    async def put(self, key: str, record: RateLimitRecord, ttl: int) -> None:
        value = json.dumps({"count": record.count, "timestamp": record.timestamp})
        try:
            await self._redis.set(key, value, ex=ttl)
        except (RedisError, OSError) as e:
            raise RateLimitStoreError(f"Failed to write {key}: {e}") from e
