"""FastAPI routes that relay tutor requests to the model provider."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from controllers.relay_controller import issue_token, relay_chat, relay_explanation, relay_translate
from routes.dependencies import get_chat_service, get_relay_settings, get_token_service
from services.openai.chat_completion import ChatCompletionService
from services.openai.realtime_token import RealtimeTokenService
from utils.settings import RelaySettings

router = APIRouter(prefix="/api", tags=["relay"])


class ChatPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_message: Optional[str] = Field(default=None, alias="userMessage")
    messages: Optional[List[Dict[str, Any]]] = None
    parse_json: bool = Field(default=False, alias="parseJSON")


class TranslatePayload(BaseModel):
    text: str


class ExplanationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_text: str = Field(default="", alias="userText")
    ai_text: str = Field(alias="aiText")


class ContentResponse(BaseModel):
    content: str


@router.get("/token")
async def get_token(service: RealtimeTokenService = Depends(get_token_service)) -> Dict[str, Any]:
    """Return an ephemeral realtime session descriptor for the browser."""
    return await issue_token(service)


@router.post("/chat", response_model=ContentResponse)
async def post_chat(
    payload: ChatPayload,
    service: ChatCompletionService = Depends(get_chat_service),
    settings: RelaySettings = Depends(get_relay_settings),
):
    """Generate the tutor's reply to a single utterance or a message list."""
    return await relay_chat(
        service,
        settings,
        user_message=payload.user_message,
        messages=payload.messages,
        parse_json=payload.parse_json,
    )


@router.post("/translate", response_model=ContentResponse)
async def post_translate(
    payload: TranslatePayload,
    service: ChatCompletionService = Depends(get_chat_service),
    settings: RelaySettings = Depends(get_relay_settings),
):
    """Translate a tutor message into Japanese."""
    return await relay_translate(service, settings, payload.text)


@router.post("/explanation", response_model=ContentResponse)
async def post_explanation(
    payload: ExplanationPayload,
    service: ChatCompletionService = Depends(get_chat_service),
    settings: RelaySettings = Depends(get_relay_settings),
):
    """Explain the tutor's reply; ``content`` is a JSON-encoded string."""
    return await relay_explanation(service, settings, payload.user_text, payload.ai_text)


@router.get("/config")
async def get_public_config(settings: RelaySettings = Depends(get_relay_settings)) -> Dict[str, Any]:
    """Expose the non-secret flags the frontend needs."""
    return {
        "translationEnabled": settings.translation_enabled,
        "realtimeModel": settings.realtime_model,
        "voice": settings.realtime_voice,
    }
