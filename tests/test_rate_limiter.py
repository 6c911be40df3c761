import asyncio

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from rollcall import rate_limiter


class FakeRedis:
    """Just enough of redis.Redis for the limiter"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def ttl(self, key):
        return 60 if key in self.store else -2

    def set(self, key, value, ex=None):
        self.store[key] = str(value)


@pytest.fixture(autouse=True)
def clear_cache():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


def _request(ip="203.0.113.7"):
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [], "client": (ip, 5000)})


def test_requests_over_limit_are_denied():
    fake = FakeRedis()
    results = [rate_limiter.check_rate_limit("k", 2, 60, fake)[0] for _ in range(3)]
    assert results == [True, True, False]


def test_counts_resume_from_redis():
    fake = FakeRedis()
    fake.store["k"] = "5"
    allowed, count, ttl = rate_limiter.check_rate_limit("k", 5, 60, fake)
    assert not allowed
    assert count == 5
    assert 0 < ttl <= 60


def test_forwarded_for_wins_over_peer_address():
    request = Request(
        {
            "type": "http",
            "headers": [(b"x-forwarded-for", b"198.51.100.1, 10.0.0.1")],
            "client": ("10.0.0.1", 5000),
        }
    )
    assert rate_limiter.client_ip(request) == "198.51.100.1"
    assert rate_limiter.client_ip(_request()) == "203.0.113.7"


def test_limiter_returns_429_with_retry_after(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: fake)
    limiter = rate_limiter.create_rate_limiter(1, 60, key_prefix="test")

    asyncio.run(limiter(_request()))
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(limiter(_request()))
    assert exc_info.value.status_code == 429
    assert "Retry-After" in exc_info.value.headers


def test_limiter_fails_closed(monkeypatch):
    def broken():
        raise ConnectionError("redis down")

    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", broken)
    limiter = rate_limiter.create_rate_limiter(1, 60)

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(limiter(_request()))
    assert exc_info.value.status_code == 503


def test_limiter_is_a_no_op_when_disabled(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", False)
    limiter = rate_limiter.create_rate_limiter(0, 60)
    assert asyncio.run(limiter(_request())) is None
