"""Availability tracking: lifecycle signals, connect/disconnect and the monitor task."""

import asyncio

import redis.asyncio as redis

from livecache.infrastructure.cache import (
    AvailabilityTracker,
    CacheService,
    ConnectionMonitor,
)


def test_tracker_starts_unavailable() -> None:
    tracker = AvailabilityTracker(lambda: True)
    assert tracker.connected is False
    assert tracker.available() is False


def test_tracker_follows_lifecycle_signals() -> None:
    tracker = AvailabilityTracker(lambda: True)
    tracker.on_connect()
    assert tracker.available() is True
    tracker.on_error(redis.ConnectionError("reset"))
    assert tracker.available() is False
    tracker.on_connect()
    tracker.on_end()
    assert tracker.available() is False


def test_tracker_requires_open_handle() -> None:
    handle = {"open": False}
    tracker = AvailabilityTracker(lambda: handle["open"])
    tracker.on_connect()
    assert tracker.available() is False
    handle["open"] = True
    assert tracker.available() is True


def test_tracker_logs_transitions_once(caplog) -> None:
    tracker = AvailabilityTracker(lambda: True)
    with caplog.at_level("INFO", logger="livecache.infrastructure.cache.availability"):
        tracker.on_connect()
        tracker.on_connect()
        tracker.on_error(redis.ConnectionError("reset"))
        tracker.on_error(redis.ConnectionError("reset"))
    messages = [r.getMessage() for r in caplog.records]
    assert sum("connected" in m for m in messages) == 1
    assert sum("unavailable" in m for m in messages) == 1


async def test_connect_marks_available_and_starts_monitor(cache) -> None:
    assert cache.is_available() is True
    assert cache.monitor.running is True


async def test_connect_to_unreachable_store_does_not_raise(fake_redis, settings) -> None:
    fake_redis.fail_with = redis.ConnectionError("refused")
    service = CacheService(redis_client=fake_redis, settings=settings)
    try:
        assert await service.connect() is False
        assert service.is_available() is False
        assert service.monitor.running is True
    finally:
        await service.disconnect()


async def test_disconnect_closes_client_and_stops_monitor(fake_redis, settings) -> None:
    service = CacheService(redis_client=fake_redis, settings=settings)
    await service.connect()
    await service.disconnect()
    assert fake_redis.closed is True
    assert service.redis is None
    assert service.monitor.running is False
    assert service.is_available() is False


async def test_monitor_check_restores_availability_after_error(cache, fake_redis) -> None:
    fake_redis.fail_with = redis.TimeoutError("timed out")
    assert await cache.monitor.check() is False
    assert cache.is_available() is False
    fake_redis.fail_with = None
    assert await cache.monitor.check() is True
    assert cache.is_available() is True


async def test_monitor_loop_reconnects_in_background(fake_redis, settings) -> None:
    fake_redis.fail_with = redis.ConnectionError("refused")
    service = CacheService(
        redis_client=fake_redis,
        settings=settings.model_copy(update={"redis_health_check_interval": 0.01}),
    )
    await service.connect()
    try:
        fake_redis.fail_with = None
        for _ in range(100):
            if service.is_available():
                break
            await asyncio.sleep(0.01)
        assert service.is_available() is True
    finally:
        await service.disconnect()


async def test_monitor_start_is_idempotent_and_stop_is_safe() -> None:
    tracker = AvailabilityTracker(lambda: True)
    ping_calls = 0

    async def ping() -> bool:
        nonlocal ping_calls
        ping_calls += 1
        return True

    monitor = ConnectionMonitor(ping, tracker, interval=3600)
    await monitor.stop()
    monitor.start()
    first = monitor._task
    monitor.start()
    assert monitor._task is first
    await monitor.stop()
    assert monitor.running is False
    assert ping_calls == 0


async def test_is_available_does_no_io(cache, fake_redis) -> None:
    fake_redis.calls.clear()
    for _ in range(10):
        cache.is_available()
    assert fake_redis.calls == []
