"""Pytest configuration and fixtures for livecache.

FakeRedis stands in for redis.asyncio.Redis: an in-memory store with a
manual clock so expiry can be driven by tests (fake_redis.advance(seconds)).
It records every command so tests can assert which calls were (not) made.
"""

import fnmatch
import math

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from livecache.core.config import Settings, get_settings
from livecache.infrastructure.cache import CacheService
from livecache.main import create_app


class FakeRedis:
    """In-memory subset of the redis.asyncio.Redis API used by CacheService."""

    def __init__(self) -> None:
        self.now = 0.0
        self.data: dict[str, tuple[str, float | None]] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.fail_with: Exception | None = None
        # command name -> error raised once by the next call to that command
        self.fail_next: dict[str, Exception] = {}
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def calls_to(self, name: str) -> list[tuple]:
        return [args for called, args in self.calls if called == name]

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with
        if name in self.fail_next:
            raise self.fail_next.pop(name)

    def _live(self, name: str) -> tuple[str, float | None] | None:
        entry = self.data.get(name)
        if entry is None:
            return None
        expires = entry[1]
        if expires is not None and self.now >= expires:
            del self.data[name]
            return None
        return entry

    async def ping(self) -> bool:
        self._record("ping")
        return True

    async def get(self, name: str) -> str | None:
        self._record("get", name)
        entry = self._live(name)
        return entry[0] if entry else None

    async def setex(self, name: str, time: int, value: str) -> bool:
        self._record("setex", name, time, value)
        self.data[name] = (value, self.now + time)
        return True

    async def delete(self, *names: str) -> int:
        self._record("delete", *names)
        count = 0
        for name in names:
            if self._live(name) is not None:
                del self.data[name]
                count += 1
        return count

    async def keys(self, pattern: str) -> list[str]:
        self._record("keys", pattern)
        return [k for k in list(self.data) if self._live(k) and fnmatch.fnmatchcase(k, pattern)]

    async def incr(self, name: str) -> int:
        self._record("incr", name)
        entry = self._live(name)
        value = int(entry[0]) + 1 if entry else 1
        self.data[name] = (str(value), entry[1] if entry else None)
        return value

    async def expire(self, name: str, time: int) -> bool:
        self._record("expire", name, time)
        entry = self._live(name)
        if entry is None:
            return False
        self.data[name] = (entry[0], self.now + time)
        return True

    async def ttl(self, name: str) -> int:
        self._record("ttl", name)
        entry = self._live(name)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return math.ceil(entry[1] - self.now)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Settings without .env; the monitor interval is long so tests drive it by hand."""
    return Settings(_env_file=None, redis_health_check_interval=3600)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def cache(fake_redis: FakeRedis, settings: Settings) -> CacheService:
    """Connected CacheService over FakeRedis."""
    service = CacheService(redis_client=fake_redis, settings=settings)
    await service.connect()
    yield service
    await service.disconnect()


@pytest.fixture
def offline_cache(fake_redis: FakeRedis, settings: Settings) -> CacheService:
    """CacheService that never saw a connect signal (store unavailable)."""
    return CacheService(redis_client=fake_redis, settings=settings)


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Clear get_settings cache before and after; use with monkeypatch.setenv."""
    monkeypatch.setenv("REDIS_HEALTH_CHECK_INTERVAL", "3600")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app(fresh_settings) -> FastAPI:
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Lifespan does not run."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
