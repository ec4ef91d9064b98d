"""Caches for computed recommendation lists.

Values are JSON-compatible payloads (lists of dicts), so the same engine code
works against the process-local cache and against Redis.
"""

from __future__ import annotations

import copy
import json
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional, Protocol

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

KEY_PREFIX = "recommendations"


def recommendation_cache_key(learner_id: str, limit: int) -> str:
    normalized = learner_id.strip()
    if not normalized:
        raise ValueError("Learner id cannot be empty when building a cache key.")
    return f"{KEY_PREFIX}:{normalized}:{int(limit)}"


class RecommendationCache(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class InMemoryRecommendationCache:
    """Process-local cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, _CacheEntry] = {}
        self._clock = clock
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = _CacheEntry(
                value=copy.deepcopy(value),
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisRecommendationCache:
    """Redis-backed cache storing JSON payloads with ``SET ... EX``.

    Redis errors are logged and reported as misses; a cache outage must never
    fail a recommendation request.
    """

    def __init__(self, client: "redis.Redis", namespace: str = "learnrec") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "learnrec") -> "RedisRecommendationCache":
        return cls(redis.from_url(url), namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._client.get(self._key(key))
        except RedisError as exc:
            logger.warning("Recommendation cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            self._client.set(self._key(key), json.dumps(value), ex=ttl_seconds)
        except RedisError as exc:
            logger.warning("Recommendation cache write failed for %s: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except RedisError as exc:
            logger.warning("Recommendation cache delete failed for %s: %s", key, exc)


__all__ = [
    "InMemoryRecommendationCache",
    "RecommendationCache",
    "RedisRecommendationCache",
    "recommendation_cache_key",
]
