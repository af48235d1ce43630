"""Conversation domain models for the tutoring session client."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4


def new_message_id(prefix: str) -> str:
	"""Return a unique message id such as ``ai-3f2a...``."""
	return f"{prefix}-{uuid4().hex}"


@dataclass
class Message:
	"""A single chat bubble. Only ``translation`` changes after creation."""

	id: str
	text: str
	is_user: bool
	timestamp: float = field(default_factory=lambda: time.time())
	translation: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		data: Dict[str, Any] = {
			"id": self.id,
			"text": self.text,
			"isUser": self.is_user,
			"timestamp": self.timestamp,
		}
		if self.translation is not None:
			data["translation"] = self.translation
		return data


@dataclass
class Explanation:
	"""Japanese explanation of an English expression used by the tutor."""

	id: str
	english: str
	japanese: str
	grammar: Optional[str] = None


class SessionPhase(str, Enum):
	"""Lifecycle of the realtime voice session."""

	IDLE = "idle"
	ACTIVATING = "activating"
	ACTIVE = "active"
