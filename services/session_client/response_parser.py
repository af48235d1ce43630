"""Helpers to extract structured data from relay and realtime payloads."""

from __future__ import annotations

import json
from typing import Any, Dict, List
from uuid import uuid4

from models.session_models import Explanation


def parse_explanation(raw: str) -> Explanation:
	"""Build an Explanation from the relay's JSON string.

	Raises ValueError when the payload is not a JSON object with the
	``english`` and ``japanese`` keys.
	"""
	data = json.loads(raw)
	if not isinstance(data, dict):
		raise ValueError("Explanation payload must be a JSON object.")
	english = data.get("english")
	japanese = data.get("japanese")
	if not isinstance(english, str) or not isinstance(japanese, str):
		raise ValueError("Explanation payload requires 'english' and 'japanese' strings.")
	grammar = data.get("grammar") or None
	return Explanation(id=uuid4().hex, english=english, japanese=japanese, grammar=grammar)


def response_text_outputs(event: Dict[str, Any]) -> List[str]:
	"""Return the joined text of each message output in a ``response.done`` event."""
	response = event.get("response")
	if not isinstance(response, dict):
		return []
	outputs = response.get("output")
	if not isinstance(outputs, list):
		return []
	texts: List[str] = []
	for output in outputs:
		if not isinstance(output, dict) or output.get("type") != "message":
			continue
		content = output.get("content")
		if not isinstance(content, list):
			continue
		text = "".join(
			part["text"]
			for part in content
			if isinstance(part, dict) and part.get("type") == "text" and isinstance(part.get("text"), str)
		)
		if text.strip():
			texts.append(text)
	return texts
