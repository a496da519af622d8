"""
Cache invalidation for per-student caches

Filter options for the admissions listing and the rendered student profile
are cached in Redis per (student, user). After a prediction run commits, the
keys are deleted so the next read recomputes them. Invalidation is
best-effort: every key is deleted independently and failures are only logged;
the cache TTL bounds any staleness.
"""

import logging
from typing import List, Optional
from uuid import UUID

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from uniguide.config.settings import settings

logger = logging.getLogger(__name__)

GUEST_SEGMENT = "guest"


class CacheKeys:
    """Key naming scheme shared with the API layer that fills these caches."""

    @staticmethod
    def admission_fields(student_id: UUID, user_id: Optional[UUID] = None) -> str:
        return f"admission_fields:{student_id}:{user_id or GUEST_SEGMENT}"

    @staticmethod
    def student_profile(student_id: UUID, user_id: Optional[UUID] = None) -> str:
        return f"student_profile:{student_id}:{user_id or GUEST_SEGMENT}"

    @classmethod
    def all_admission_fields_keys(cls, student_id: UUID, user_id: Optional[UUID] = None) -> List[str]:
        """The guest key always, plus the user key when a user is known."""
        keys = [cls.admission_fields(student_id)]
        if user_id is not None:
            keys.append(cls.admission_fields(student_id, user_id))
        return keys

    @classmethod
    def for_student(cls, student_id: UUID, user_id: Optional[UUID] = None) -> List[str]:
        keys = cls.all_admission_fields_keys(student_id, user_id)
        keys.append(cls.student_profile(student_id))
        if user_id is not None:
            keys.append(cls.student_profile(student_id, user_id))
        return keys


def create_redis_client(url: Optional[str] = None) -> aioredis.Redis:
    """Redis client backed by a bounded connection pool."""
    pool = aioredis.ConnectionPool.from_url(
        url or settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
    )
    return aioredis.Redis(connection_pool=pool)


class CacheInvalidator:
    """Deletes a student's cache keys after a successful write."""

    def __init__(self, client: aioredis.Redis):
        self._client = client

    async def invalidate_student(self, student_id: UUID, user_id: Optional[UUID] = None) -> int:
        """
        Delete every cache key of the student.

        Returns:
            Number of keys whose delete command succeeded
        """
        succeeded = 0
        for key in CacheKeys.for_student(student_id, user_id):
            if await self._delete(key):
                succeeded += 1
        logger.info(f"[CACHE] Invalidated {succeeded} key(s) for student {student_id}")
        return succeeded

    async def _delete(self, key: str) -> bool:
        try:
            await self._client.delete(key)
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"[CACHE] Failed to invalidate '{key}': {e}")
            return False
