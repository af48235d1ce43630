"""Relay orchestration: build the provider request, forward it, normalize the reply."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from services.openai.chat_completion import ChatCompletionService
from services.openai.prompts import explanation_user_prompt
from services.openai.realtime_token import RealtimeTokenService
from utils.settings import RelaySettings

logger = logging.getLogger(__name__)

CHAT_FAILURE = "Failed to generate response"
TRANSLATION_FAILURE = "Failed to translate text"
EXPLANATION_FAILURE = "Failed to generate explanation"
TOKEN_FAILURE = "Failed to generate token"


def _with_system_prompt(messages: List[Dict[str, Any]], system_prompt: Optional[str]) -> List[Dict[str, Any]]:
	"""Prepend ``system_prompt`` unless the caller already opened with a system turn."""
	if not system_prompt:
		return list(messages)
	if messages and messages[0].get("role") == "system":
		return list(messages)
	return [{"role": "system", "content": system_prompt}, *messages]


async def _forward(
	service: ChatCompletionService,
	messages: List[Dict[str, Any]],
	*,
	temperature: float,
	json_output: bool,
	failure_detail: str,
) -> Dict[str, str]:
	try:
		content = await service.complete(messages, temperature=temperature, json_output=json_output)
	except Exception:  # pylint: disable=broad-exception-caught
		logger.exception("Upstream completion failed (%s)", failure_detail)
		raise HTTPException(status_code=500, detail=failure_detail) from None
	return {"content": content}


async def relay_chat(
	service: ChatCompletionService,
	settings: RelaySettings,
	*,
	user_message: Optional[str] = None,
	messages: Optional[List[Dict[str, Any]]] = None,
	parse_json: bool = False,
) -> Dict[str, str]:
	"""Forward either a single utterance or a full message list to the chat deployment."""
	if messages:
		outbound = list(messages)
	elif user_message and user_message.strip():
		outbound = [{"role": "user", "content": user_message}]
	else:
		raise HTTPException(status_code=400, detail="Either userMessage or messages is required.")

	return await _forward(
		service,
		_with_system_prompt(outbound, settings.chat_system_prompt),
		temperature=settings.chat_temperature,
		json_output=parse_json,
		failure_detail=CHAT_FAILURE,
	)


async def relay_translate(service: ChatCompletionService, settings: RelaySettings, text: str) -> Dict[str, str]:
	"""Translate ``text`` with the fixed translation prompt at a low temperature."""
	if not text.strip():
		raise HTTPException(status_code=400, detail="Text to translate is required.")
	messages = [
		{"role": "system", "content": settings.translation_system_prompt},
		{"role": "user", "content": text},
	]
	return await _forward(
		service,
		messages,
		temperature=settings.translation_temperature,
		json_output=False,
		failure_detail=TRANSLATION_FAILURE,
	)


async def relay_explanation(
	service: ChatCompletionService,
	settings: RelaySettings,
	user_text: str,
	ai_text: str,
) -> Dict[str, str]:
	"""Return the raw JSON string explaining ``ai_text`` in reply to ``user_text``."""
	if not ai_text.strip():
		raise HTTPException(status_code=400, detail="aiText is required.")
	messages = [
		{"role": "system", "content": settings.explanation_system_prompt},
		{"role": "user", "content": explanation_user_prompt(user_text, ai_text)},
	]
	return await _forward(
		service,
		messages,
		temperature=settings.chat_temperature,
		json_output=True,
		failure_detail=EXPLANATION_FAILURE,
	)


async def issue_token(service: RealtimeTokenService) -> Dict[str, Any]:
	"""Return the provider session descriptor unmodified."""
	try:
		return await service.create_session()
	except Exception as exc:  # pylint: disable=broad-exception-caught
		logger.exception("Token generation error")
		raise HTTPException(status_code=500, detail={"error": TOKEN_FAILURE, "details": str(exc)}) from exc
