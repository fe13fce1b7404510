import asyncio
import logging
import time

import httpx

from app.core.config import Settings
from app.core.errors import CalendarAPIError

logger = logging.getLogger(__name__)

# Refresh this many seconds before Google's reported expiry
_EXPIRY_MARGIN_SECONDS = 60


class GoogleTokenProvider:
    """Exchanges the configured refresh token for short-lived access tokens and caches them."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client
        self._access_token: str | None = None
        self._expires_at: float = 0.0
        self._refresh_lock = asyncio.Lock()

    def _valid(self) -> bool:
        return self._access_token is not None and time.monotonic() < self._expires_at

    async def get_access_token(self) -> str:
        if self._valid():
            return self._access_token  # type: ignore[return-value]
        async with self._refresh_lock:
            if not self._valid():
                await self._refresh()
        return self._access_token  # type: ignore[return-value]

    def invalidate(self) -> None:
        self._access_token = None
        self._expires_at = 0.0

    async def _refresh(self) -> None:
        if not self._settings.google_configured:
            raise CalendarAPIError("Google OAuth not configured")
        try:
            resp = await self._client.post(
                self._settings.google_token_url,
                data={
                    "client_id": self._settings.google_client_id,
                    "client_secret": self._settings.google_client_secret,
                    "refresh_token": self._settings.google_refresh_token,
                    "grant_type": "refresh_token",
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise CalendarAPIError(f"Token request failed: {type(e).__name__}") from e
        if resp.status_code != 200:
            logger.warning(
                "Google token refresh failed: status=%s body=%s",
                resp.status_code,
                resp.text[:500],
            )
            raise CalendarAPIError("Token refresh rejected", status_code=resp.status_code)
        try:
            payload = resp.json()
        except ValueError as e:
            raise CalendarAPIError("Token response is not JSON", status_code=resp.status_code) from e
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise CalendarAPIError("Token response without access_token")
        token = payload["access_token"]
        try:
            expires_in = int(payload.get("expires_in", 3600))
        except (TypeError, ValueError) as e:
            raise CalendarAPIError("Token response with invalid expires_in") from e
        self._access_token = token
        self._expires_at = time.monotonic() + max(expires_in - _EXPIRY_MARGIN_SECONDS, 0)
        logger.debug("Google access token refreshed (expires in %ss)", expires_in)
