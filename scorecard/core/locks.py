"""
Per-organization serialization for rollups and replications.

Two rollups (or two replications) over overlapping organization subtrees race
on the same rows, so callers run them under ``organization_lock``. The Redis
client is created lazily on first use and reused for the life of the process.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import redis

from scorecard.core.config import settings
from scorecard.core.exceptions import LockUnavailable

logger = logging.getLogger(__name__)

LOCK_PREFIX = "scorecard:org-lock:"

_redis_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
        )
        logger.info(f"🔌 [Locks] Redis client initialised for {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    return _redis_client


def reset_redis() -> None:
    """Drop the cached client (used after fork and in tests)."""
    global _redis_client
    _redis_client = None


@contextmanager
def organization_lock(organization_id) -> Iterator[None]:
    if not settings.ORGANIZATION_LOCKS_ENABLED:
        yield
        return

    name = f"{LOCK_PREFIX}{organization_id}"
    lock = get_redis().lock(
        name,
        timeout=settings.ORGANIZATION_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.ORGANIZATION_LOCK_BLOCKING_SECONDS,
    )
    if not lock.acquire():
        logger.warning(f"⏳ [Locks] Could not acquire {name}")
        raise LockUnavailable(f"Organization {organization_id} is busy, try again later")
    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Expired while held; the work itself already committed or rolled back.
            logger.warning(f"⚠️ [Locks] Lock {name} expired before release")
