"""Background explanation and translation for tutor messages."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Dict, Optional, Tuple

from models.session_models import Explanation, Message
from services.session_client.capabilities import Notifier
from services.session_client.conversation_store import ConversationStore
from services.session_client.relay_client import RelayClient
from services.session_client.response_parser import parse_explanation

logger = logging.getLogger(__name__)

TaskKey = Tuple[str, str]


class EnrichmentScheduler:
	"""Run explanation and translation calls as tasks keyed by message id.

	Scheduling a key that already has a running task cancels the older task.
	Results that arrive after the user has moved on are still applied.
	"""

	def __init__(
		self,
		relay: RelayClient,
		store: ConversationStore,
		notifier: Notifier,
		*,
		translation_enabled: bool = False,
	) -> None:
		self.relay = relay
		self.store = store
		self.notifier = notifier
		self.translation_enabled = translation_enabled
		self._tasks: Dict[TaskKey, asyncio.Task] = {}

	def schedule(self, message: Message, user_text: str) -> None:
		"""Start explanation and, when enabled, translation for an AI message."""
		self._spawn(("explanation", message.id), self.explain(user_text, message.text))
		if self.translation_enabled:
			self._spawn(("translation", message.id), self.translate(message))

	def _spawn(self, key: TaskKey, coro: Awaitable) -> asyncio.Task:
		previous = self._tasks.pop(key, None)
		if previous is not None and not previous.done():
			logger.debug("Superseding %s task for %s", *key)
			previous.cancel()
		task = asyncio.ensure_future(coro)
		self._tasks[key] = task
		task.add_done_callback(lambda done, key=key: self._forget(key, done))
		return task

	def _forget(self, key: TaskKey, task: asyncio.Task) -> None:
		if self._tasks.get(key) is task:
			del self._tasks[key]

	async def explain(self, user_text: str, ai_text: str) -> Optional[Explanation]:
		"""Fetch, parse and prepend an explanation; failures are reported, not raised."""
		try:
			raw = await self.relay.explain(user_text, ai_text)
			explanation = parse_explanation(raw)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			logger.warning("Failed to generate explanation: %s", exc)
			self.notifier.error("Failed to generate an explanation.")
			return None
		return self.store.add_explanation(explanation)

	async def translate(self, message: Message) -> Optional[str]:
		"""Fetch a translation and attach it to ``message`` by id."""
		if not self.translation_enabled:
			return None
		try:
			translation = await self.relay.translate(message.text)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			logger.warning("Failed to translate message %s: %s", message.id, exc)
			self.notifier.error("Failed to translate the message.")
			return None
		try:
			self.store.attach_translation(message.id, translation)
		except KeyError:
			logger.warning("Dropping translation for unknown message %s", message.id)
			return None
		return translation

	@property
	def pending(self) -> int:
		return len(self._tasks)

	async def drain(self) -> None:
		"""Wait until no explanation or translation task is outstanding."""
		while self._tasks:
			await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

	def cancel(self, message_id: str) -> None:
		for key in [key for key in self._tasks if key[1] == message_id]:
			self._tasks.pop(key).cancel()

	def cancel_all(self) -> None:
		for task in self._tasks.values():
			task.cancel()
		self._tasks.clear()
