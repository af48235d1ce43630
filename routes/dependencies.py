"""Shared request dependencies for the relay routes."""

from fastapi import HTTPException, Request

from services.openai.chat_completion import ChatCompletionService
from services.openai.realtime_token import RealtimeTokenService
from utils.settings import RelaySettings


def get_relay_settings(request: Request) -> RelaySettings:
    """Retrieve the relay settings from the app state."""
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise HTTPException(status_code=500, detail="Relay settings not initialized.")
    return settings


def get_chat_service(request: Request) -> ChatCompletionService:
    """Build a chat service around the shared OpenAI client."""
    openai_client = getattr(request.app.state, "openai_client", None)
    if openai_client is None:
        raise HTTPException(status_code=500, detail="OpenAI client not initialized.")
    settings = get_relay_settings(request)
    return ChatCompletionService(openai_client, settings.chat_deployment_name)


def get_token_service(request: Request) -> RealtimeTokenService:
    """Build a token service around the shared HTTP client."""
    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        raise HTTPException(status_code=500, detail="HTTP client not initialized.")
    return RealtimeTokenService(http_client, get_relay_settings(request))
