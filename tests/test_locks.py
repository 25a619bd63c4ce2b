from unittest.mock import MagicMock

import pytest
import redis

from scorecard.core import locks
from scorecard.core.config import settings
from scorecard.core.exceptions import LockUnavailable


@pytest.fixture
def fake_redis(monkeypatch):
    monkeypatch.setattr(settings, "ORGANIZATION_LOCKS_ENABLED", True)
    client = MagicMock()
    monkeypatch.setattr(locks, "get_redis", lambda: client)
    return client


def test_disabled_lock_never_touches_redis(monkeypatch):
    monkeypatch.setattr(settings, "ORGANIZATION_LOCKS_ENABLED", False)
    get_redis = MagicMock()
    monkeypatch.setattr(locks, "get_redis", get_redis)

    with locks.organization_lock("org-1"):
        pass

    get_redis.assert_not_called()


def test_lock_is_acquired_and_released(fake_redis):
    lock = fake_redis.lock.return_value
    lock.acquire.return_value = True

    with locks.organization_lock("org-1"):
        lock.release.assert_not_called()

    fake_redis.lock.assert_called_once_with(
        "scorecard:org-lock:org-1",
        timeout=settings.ORGANIZATION_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.ORGANIZATION_LOCK_BLOCKING_SECONDS,
    )
    lock.release.assert_called_once()


def test_busy_organization_raises(fake_redis):
    fake_redis.lock.return_value.acquire.return_value = False

    with pytest.raises(LockUnavailable):
        with locks.organization_lock("org-1"):
            pytest.fail("body must not run without the lock")


def test_expired_lock_release_is_tolerated(fake_redis):
    lock = fake_redis.lock.return_value
    lock.acquire.return_value = True
    lock.release.side_effect = redis.exceptions.LockError("expired")

    with locks.organization_lock("org-1"):
        pass


def test_release_happens_when_body_fails(fake_redis):
    lock = fake_redis.lock.return_value
    lock.acquire.return_value = True

    with pytest.raises(ValueError):
        with locks.organization_lock("org-1"):
            raise ValueError("rollup failed")

    lock.release.assert_called_once()


def test_redis_client_is_created_once(monkeypatch):
    locks.reset_redis()
    factory = MagicMock()
    monkeypatch.setattr(locks.redis, "Redis", factory)

    assert locks.get_redis() is locks.get_redis()
    factory.assert_called_once()
    locks.reset_redis()
