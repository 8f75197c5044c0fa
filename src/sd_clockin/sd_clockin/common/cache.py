"""Cache-aside helper over Redis.

Without ``REDIS_URL`` every call is a no-op and reads go straight to the
database. Redis failures are logged and treated as cache misses.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, TypeVar

import redis

from ..core.constants import (
    CACHE_TTL_ACTIVE_TERM,
    CACHE_TTL_CHECKINS,
    CACHE_TTL_SCHEDULE,
    CACHE_TTL_SCHEDULES_LIST,
    CACHE_TTL_STUDENT_DETAIL,
    CACHE_TTL_STUDENT_LIST,
    CACHE_TTL_TERMS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKeys:
    STUDENT_LIST = "students:list"
    ACTIVE_TERM = "term:active"
    TERMS_LIST = "terms:list"

    @staticmethod
    def student_detail(student_id: int, term_id: Optional[int] = None) -> str:
        if term_id:
            return f"student:{student_id}:term:{term_id}"
        return f"student:{student_id}"

    @staticmethod
    def student_schedule(student_id: int, term_id: int) -> str:
        return f"schedule:{student_id}:term:{term_id}"

    @staticmethod
    def student_checkins(student_id: int, term_id: int) -> str:
        return f"checkins:{student_id}:term:{term_id}"

    @staticmethod
    def term_detail(term_id: int) -> str:
        return f"term:{term_id}"

    @staticmethod
    def schedules_list(term_id: int) -> str:
        return f"schedules:term:{term_id}"

    @staticmethod
    def student_list_for_term(term_id: int) -> str:
        return f"students:list:term:{term_id}"


class CacheTTL:
    CHECKINS = CACHE_TTL_CHECKINS
    ACTIVE_TERM = CACHE_TTL_ACTIVE_TERM
    STUDENT_LIST = CACHE_TTL_STUDENT_LIST
    STUDENT_DETAIL = CACHE_TTL_STUDENT_DETAIL
    SCHEDULE = CACHE_TTL_SCHEDULE
    TERMS = CACHE_TTL_TERMS
    SCHEDULES_LIST = CACHE_TTL_SCHEDULES_LIST


class Cache:
    def __init__(self, url: Optional[str] = None, *, client: Optional[redis.Redis] = None):
        self._url = url
        self._client = client
        self._connect_failed = False

    @property
    def enabled(self) -> bool:
        return self._get_client() is not None

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is not None:
            return self._client
        if not self._url or self._connect_failed:
            return None
        try:
            c = redis.Redis.from_url(
                self._url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
            )
            c.ping()
            self._client = c
            logger.info("Redis cache connected.")
        except redis.RedisError as e:
            self._connect_failed = True
            logger.warning("Redis unavailable (%s). Running without cache.", e)
        return self._client

    def get(self, key: str) -> Any:
        r = self._get_client()
        if r is None:
            return None
        try:
            raw = r.get(key)
        except redis.RedisError as e:
            logger.error("Cache GET error for %s: %s", key, e)
            return None
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        r = self._get_client()
        if r is None:
            return
        try:
            r.setex(key, int(ttl_seconds), json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.error("Cache SET error for %s: %s", key, e)

    def delete(self, key: str) -> None:
        r = self._get_client()
        if r is None:
            return
        try:
            r.delete(key)
        except redis.RedisError as e:
            logger.error("Cache DELETE error for %s: %s", key, e)

    def delete_pattern(self, pattern: str) -> int:
        r = self._get_client()
        if r is None:
            return 0
        try:
            keys = list(r.scan_iter(match=pattern))
            if keys:
                r.delete(*keys)
            return len(keys)
        except redis.RedisError as e:
            logger.error("Cache DELETE pattern error for %s: %s", pattern, e)
            return 0

    def wrapper(self, key: str, ttl_seconds: int, fetch: Callable[[], T]) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached
        data = fetch()
        self.set(key, data, ttl_seconds)
        return data

    def invalidate_student(self, student_id: int, term_id: Optional[int] = None) -> None:
        for pattern in (
            f"student:{student_id}*",
            f"schedule:{student_id}*",
            f"checkins:{student_id}*",
            "students:list*",
        ):
            self.delete_pattern(pattern)

    def invalidate_term(self, term_id: int) -> None:
        self.delete_pattern(f"*:term:{term_id}*")
        self.delete(CacheKeys.term_detail(term_id))
        self.delete(CacheKeys.schedules_list(term_id))
        self.delete(CacheKeys.TERMS_LIST)
        self.delete(CacheKeys.ACTIVE_TERM)

    def flush_all(self) -> bool:
        r = self._get_client()
        if r is None:
            return False
        try:
            r.flushdb()
            logger.info("Cache flushed.")
            return True
        except redis.RedisError as e:
            logger.error("Cache FLUSH error: %s", e)
            return False
