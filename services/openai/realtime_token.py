"""Issue ephemeral realtime session credentials from the provider."""

import logging
from typing import Any, Dict

import httpx

from utils.settings import RelaySettings

logger = logging.getLogger(__name__)


class RealtimeTokenError(RuntimeError):
    """Raised when the provider refuses or garbles a session request."""


class RealtimeTokenService:
    """Create realtime sessions with server-held credentials."""

    def __init__(self, http_client: httpx.AsyncClient, settings: RelaySettings) -> None:
        if http_client is None:
            raise ValueError("An httpx.AsyncClient is required.")
        self.http_client = http_client
        self.settings = settings

    async def create_session(self) -> Dict[str, Any]:
        """Return the provider's session descriptor, including the client secret."""
        settings = self.settings
        if not settings.realtime_configured:
            raise RealtimeTokenError("Realtime credentials are not configured.")

        response = await self.http_client.post(
            settings.realtime_sessions_url(),
            params={"api-version": settings.realtime_api_version} if settings.realtime_api_version else None,
            headers={
                "api-key": settings.realtime_api_key.get_secret_value(),
                "Content-Type": "application/json",
            },
            json={
                "model": settings.realtime_deployment_name,
                "voice": settings.realtime_voice,
            },
        )
        if response.is_error:
            logger.error("Realtime session request failed (%s): %s", response.status_code, response.text)
            raise RealtimeTokenError(f"Provider returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise RealtimeTokenError("Provider returned a non-JSON session descriptor") from exc
