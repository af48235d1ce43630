"""Helpers to parse Chat Completions outputs."""

from typing import Any, Dict, Optional


class RelayUpstreamError(RuntimeError):
    """Raised when the provider answers with something the relay cannot use."""


def extract_first_choice_text(response: Any) -> str:
    """Return the text content of the first choice in a chat completion."""
    choices = getattr(response, "choices", None)
    if not choices:
        raise RelayUpstreamError("Chat completion response contained no choices.")

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None:
        raise RelayUpstreamError("First choice did not include message content.")
    return content


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
        "completion_tokens": getattr(usage, "completion_tokens", None) if usage else None,
    }
