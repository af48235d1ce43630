"""Simple in-memory store for the tutoring conversation."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from models.session_models import Explanation, Message, new_message_id


def _local_timestamp() -> str:
	return time.strftime("%H:%M:%S")


class ConversationStore:
	"""Hold messages (display order), explanations and realtime events (newest first)."""

	def __init__(self) -> None:
		self.messages: List[Message] = []
		self.explanations: List[Explanation] = []
		self.events: List[Dict[str, Any]] = []

	@property
	def has_started(self) -> bool:
		return bool(self.messages)

	def add_message(self, text: str, *, is_user: bool, prefix: Optional[str] = None) -> Message:
		"""Create and append a message."""
		message = Message(id=new_message_id(prefix or ("user" if is_user else "ai")), text=text, is_user=is_user)
		return self.append(message)

	def append(self, message: Message) -> Message:
		"""Append ``message``; a redelivered id only refreshes the translation."""
		for existing in self.messages:
			if existing.id == message.id:
				if message.translation is not None:
					existing.translation = message.translation
				return existing
		self.messages.append(message)
		return message

	def get(self, message_id: str) -> Message:
		"""Return a message or raise KeyError if missing."""
		for message in self.messages:
			if message.id == message_id:
				return message
		raise KeyError(f"Message {message_id} not found")

	def attach_translation(self, message_id: str, translation: str) -> Message:
		"""Set the translation of the message with ``message_id``."""
		message = self.get(message_id)
		message.translation = translation
		return message

	def last_user_text(self) -> Optional[str]:
		for message in reversed(self.messages):
			if message.is_user:
				return message.text
		return None

	def add_explanation(self, explanation: Explanation) -> Explanation:
		self.explanations.insert(0, explanation)
		return explanation

	def log_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
		"""Record a realtime event for debugging, stamping a local time if absent."""
		if not event.get("timestamp"):
			event["timestamp"] = _local_timestamp()
		self.events.insert(0, event)
		return event

	def clear_events(self) -> None:
		self.events.clear()
