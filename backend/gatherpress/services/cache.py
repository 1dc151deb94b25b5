"""Aggregate cache implementations.

The cache is shared by every worker through Redis so that a write in one
process invalidates the view all processes admit against.
"""
import logging
from typing import Optional

import redis
from pydantic import ValidationError

from gatherpress.config import settings
from gatherpress.exceptions import CacheError
from gatherpress.schemas.rsvp import Aggregate
from gatherpress.services.interfaces import AggregateCache

logger = logging.getLogger(__name__)

CACHE_KEY = "gatherpress_rsvp_%d"


class RedisAggregateCache(AggregateCache):
    """Aggregates stored as JSON with a Redis-side TTL."""

    def __init__(self, client: redis.Redis, key_format: str = CACHE_KEY):
        self.client = client
        self.key_format = key_format

    def _key(self, event_id: int) -> str:
        return self.key_format % event_id

    def get(self, event_id: int) -> Optional[Aggregate]:
        try:
            payload = self.client.get(self._key(event_id))
        except redis.RedisError as exc:
            raise CacheError(f"Could not read cached responses for event {event_id}") from exc
        if payload is None:
            return None
        try:
            return Aggregate.model_validate_json(payload)
        except ValidationError:
            logger.warning("Discarding unreadable cached responses for event %s", event_id)
            return None

    def set(self, event_id: int, aggregate: Aggregate, ttl_seconds: int) -> None:
        try:
            self.client.setex(self._key(event_id), ttl_seconds, aggregate.model_dump_json())
        except redis.RedisError as exc:
            raise CacheError(f"Could not cache responses for event {event_id}") from exc

    def invalidate(self, event_id: int) -> None:
        try:
            self.client.delete(self._key(event_id))
        except redis.RedisError as exc:
            raise CacheError(f"Could not invalidate cached responses for event {event_id}") from exc

    def clear(self) -> None:
        pattern = self.key_format.replace("%d", "*")
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as exc:
            raise CacheError("Could not clear cached responses") from exc


class NullAggregateCache(AggregateCache):
    """Caches nothing; every read goes to the repository."""

    def get(self, event_id: int) -> Optional[Aggregate]:
        return None

    def set(self, event_id: int, aggregate: Aggregate, ttl_seconds: int) -> None:
        pass

    def invalidate(self, event_id: int) -> None:
        pass

    def clear(self) -> None:
        pass


def _build_cache() -> AggregateCache:
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set; RSVP responses will not be cached")
        return NullAggregateCache()
    client = redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2, socket_timeout=2)
    return RedisAggregateCache(client)


aggregate_cache = _build_cache()


def get_aggregate_cache() -> AggregateCache:
    """FastAPI dependency — the process-wide aggregate cache."""
    return aggregate_cache
