"""Chat completion helper built on the Azure OpenAI deployment."""

import logging
from typing import Any, Dict, List, Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI

from services.openai.response_parser import extract_first_choice_text, extract_usage
from utils.settings import RelaySettings

logger = logging.getLogger(__name__)


def build_chat_client(settings: RelaySettings) -> Optional[AsyncOpenAI]:
    """Return an async client for the chat deployment, or None when unconfigured.

    Retries are disabled so each relay request makes exactly one upstream call.
    """
    if not settings.chat_configured:
        return None
    return AsyncAzureOpenAI(
        api_key=settings.chat_api_key.get_secret_value(),
        azure_endpoint=settings.chat_endpoint,
        api_version=settings.chat_api_version,
        max_retries=0,
    )


class ChatCompletionService:
    """Send a message list to the chat deployment and return the first reply."""

    def __init__(self, client: AsyncOpenAI, deployment: str) -> None:
        """Initialize the service with a shared OpenAI client and deployment name."""
        if client is None:
            raise ValueError("OpenAI client is required for chat completions.")
        if not deployment:
            raise ValueError("A chat deployment name is required.")
        self.client = client
        self.deployment = deployment

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        temperature: float,
        json_output: bool = False,
    ) -> str:
        """Return the text of the first choice for ``messages``.

        Args:
            messages: Chat messages in provider format.
            temperature: Sampling temperature for this call.
            json_output: Request a JSON object response format.

        Raises:
            openai.APIError: On transport or non-2xx provider responses.
            RelayUpstreamError: If the response has no usable first choice.
        """
        params: Dict[str, Any] = {
            "model": self.deployment,
            "messages": messages,
            "temperature": temperature,
        }
        if json_output:
            params["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**params)
        logger.debug("Chat completion usage: %s", extract_usage(response))
        return extract_first_choice_text(response)
