"""Tests for the ShipRelay bearer token cache.

The HTTP client is an AsyncMock and the clock is a controllable stub,
so expiry behaviour is exercised without waiting.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.errors import UpstreamAuthError
from src.services.token_cache import DEFAULT_TOKEN_TTL, CachedToken, ShipRelayTokenCache
from tests.helpers import json_response, text_response

BASE_URL = "https://console.shiprelay.com/api/v2"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http() -> AsyncMock:
    mock = AsyncMock()
    mock.post.return_value = json_response(200, {"access_token": "tok-1"}, method="POST")
    return mock


@pytest.fixture
def cache(http, clock) -> ShipRelayTokenCache:
    return ShipRelayTokenCache(
        http, BASE_URL, "agent@example.com", "hunter22", clock=clock
    )


class TestCachedToken:
    """Tests for the token slot."""

    def test_empty_slot_is_invalid(self):
        assert CachedToken().is_valid(datetime.now(UTC)) is False

    def test_valid_before_expiry(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = CachedToken(value="t", expires_at=now + timedelta(seconds=1))
        assert token.is_valid(now) is True

    def test_invalid_at_expiry_instant(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = CachedToken(value="t", expires_at=now)
        assert token.is_valid(now) is False


class TestGetToken:
    """Tests for ShipRelayTokenCache.get_token."""

    @pytest.mark.asyncio
    async def test_first_call_logs_in(self, cache, http):
        """An empty cache performs exactly one login."""
        token = await cache.get_token()

        assert token == "tok-1"
        http.post.assert_awaited_once_with(
            f"{BASE_URL}/login",
            json={"email": "agent@example.com", "password": "hunter22"},
            headers={"Content-Type": "application/json"},
        )

    @pytest.mark.asyncio
    async def test_expiry_is_login_time_plus_ttl(self, cache, clock):
        await cache.get_token()
        assert cache.cached.expires_at == clock.now + DEFAULT_TOKEN_TTL
        assert DEFAULT_TOKEN_TTL == timedelta(minutes=50)

    @pytest.mark.asyncio
    async def test_reuses_token_within_ttl(self, cache, http, clock):
        """Calls inside the TTL window reuse the cached token."""
        await cache.get_token()
        clock.advance(timedelta(minutes=49, seconds=59))
        token = await cache.get_token()

        assert token == "tok-1"
        assert http.post.await_count == 1

    @pytest.mark.asyncio
    async def test_refreshes_after_expiry(self, cache, http, clock):
        """Once the expiry passes the next call logs in again."""
        await cache.get_token()
        http.post.return_value = json_response(200, {"access_token": "tok-2"}, method="POST")
        clock.advance(timedelta(minutes=50))

        token = await cache.get_token()

        assert token == "tok-2"
        assert http.post.await_count == 2
        assert cache.cached.value == "tok-2"

    @pytest.mark.asyncio
    async def test_custom_ttl(self, http, clock):
        cache = ShipRelayTokenCache(
            http, BASE_URL, "a@b.c", "pw", ttl=timedelta(seconds=10), clock=clock
        )
        await cache.get_token()
        clock.advance(timedelta(seconds=11))
        await cache.get_token()
        assert http.post.await_count == 2

    @pytest.mark.asyncio
    async def test_login_rejected_raises_auth_error(self, cache, http):
        """A non-2xx login raises and leaves the cache empty."""
        http.post.return_value = text_response(401, "bad credentials", method="POST")

        with pytest.raises(UpstreamAuthError) as exc_info:
            await cache.get_token()

        assert exc_info.value.upstream_status == 401
        assert "bad credentials" in str(exc_info.value)
        assert cache.cached.value is None
        assert cache.cached.expires_at is None

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self, cache, http):
        http.post.return_value = json_response(200, {"token_type": "bearer"}, method="POST")

        with pytest.raises(UpstreamAuthError):
            await cache.get_token()
        assert cache.cached.value is None

    @pytest.mark.asyncio
    async def test_non_json_login_body_raises(self, cache, http):
        http.post.return_value = text_response(200, "<html>ok</html>", method="POST")

        with pytest.raises(UpstreamAuthError):
            await cache.get_token()

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_caller_failing_until_login_works(
        self, cache, http, clock
    ):
        """A failed refresh does not resurrect the expired token."""
        await cache.get_token()
        clock.advance(timedelta(hours=1))
        http.post.return_value = text_response(500, "down", method="POST")

        with pytest.raises(UpstreamAuthError):
            await cache.get_token()

        http.post.return_value = json_response(200, {"access_token": "tok-3"}, method="POST")
        assert await cache.get_token() == "tok-3"
