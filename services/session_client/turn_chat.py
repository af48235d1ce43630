"""Turn-based tutor chat through the relay."""

from __future__ import annotations

import logging
from typing import Optional

from models.session_models import Message
from services.session_client.capabilities import Notifier
from services.session_client.conversation_store import ConversationStore
from services.session_client.enrichment import EnrichmentScheduler
from services.session_client.relay_client import RelayClient

logger = logging.getLogger(__name__)


class TurnBasedChat:
	"""Send one utterance, append the reply, then enrich it in the background."""

	def __init__(
		self,
		relay: RelayClient,
		store: ConversationStore,
		enrichment: EnrichmentScheduler,
		notifier: Notifier,
	) -> None:
		self.relay = relay
		self.store = store
		self.enrichment = enrichment
		self.notifier = notifier
		self.is_loading = False

	async def send(self, text: str) -> Optional[Message]:
		"""Return the tutor's reply, or None if nothing was sent or the call failed.

		Submissions are ignored while a previous one is still loading.
		"""
		text = (text or "").strip()
		if not text or self.is_loading:
			return None

		user_message = self.store.add_message(text, is_user=True)
		self.is_loading = True
		try:
			reply = await self.relay.chat(user_message.text)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			logger.error("Error generating response: %s", exc)
			self.notifier.error("Failed to generate a response. Please try again.")
			return None
		finally:
			self.is_loading = False

		ai_message = self.store.add_message(reply, is_user=False)
		self.enrichment.schedule(ai_message, user_message.text)
		return ai_message
