"""ShipRelay bearer token cache.

Holds a single access token and its expiry instant. The token is
refreshed by logging in again once the expiry passes. There is no
locking: two requests racing past the expiry may both log in, and the
last writer wins. Each login result is self-contained, so the race only
costs an extra login.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import httpx

from src.errors import UpstreamAuthError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(minutes=50)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class CachedToken:
    """Bearer token slot. Both fields are set together or both None."""

    value: str | None = None
    expires_at: datetime | None = None

    def is_valid(self, now: datetime) -> bool:
        """Return True if the token can still be used at ``now``."""
        return (
            self.value is not None
            and self.expires_at is not None
            and now < self.expires_at
        )


class ShipRelayTokenCache:
    """Lazily logs in to ShipRelay and caches the resulting token.

    Example:
        cache = ShipRelayTokenCache(http, base_url, email, password)
        token = await cache.get_token()
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        email: str,
        password: str,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize an empty cache.

        Args:
            http: Shared async HTTP client.
            base_url: ShipRelay API base URL (e.g. .../api/v2).
            email: ShipRelay login email.
            password: ShipRelay login password.
            ttl: How long a fresh token is trusted.
            clock: Returns the current UTC time; injectable for tests.
        """
        self._http = http
        self._login_url = f"{base_url.rstrip('/')}/login"
        self._email = email
        self._password = password
        self._ttl = ttl
        self._clock = clock
        self._token = CachedToken()

    @property
    def cached(self) -> CachedToken:
        """Current cache slot (read-only view for diagnostics and tests)."""
        return self._token

    async def get_token(self) -> str:
        """Return a valid bearer token, logging in when the cache is stale.

        Returns:
            The ShipRelay access token.

        Raises:
            UpstreamAuthError: If the login request is rejected or the
                response carries no access token.
            httpx.HTTPError: On transport failure.
        """
        if self._token.is_valid(self._clock()):
            logger.debug("Using cached ShipRelay token")
            return self._token.value  # type: ignore[return-value]

        logger.info("Fetching new ShipRelay token")
        response = await self._http.post(
            self._login_url,
            json={"email": self._email, "password": self._password},
            headers={"Content-Type": "application/json"},
        )
        if not response.is_success:
            raise UpstreamAuthError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            data = None
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise UpstreamAuthError(response.status_code, "Login response missing access_token")

        self._token = CachedToken(
            value=access_token,
            expires_at=self._clock() + self._ttl,
        )
        logger.info("ShipRelay token cached until %s", self._token.expires_at.isoformat())
        return access_token
