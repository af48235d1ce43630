"""Session client: conversation state plus the turn-based and realtime modes."""

from __future__ import annotations

import logging
from typing import List, Optional

from models.session_models import Explanation, Message, SessionPhase
from services.session_client.capabilities import (
	AudioSink,
	LoggingNotifier,
	MediaCapture,
	Notifier,
	NullAudioSink,
	PeerConnectionFactory,
	SpeechRecognizerFactory,
	SpeechSynthesizer,
)
from services.session_client.conversation_store import ConversationStore
from services.session_client.dictation import Dictation
from services.session_client.enrichment import EnrichmentScheduler
from services.session_client.realtime_session import RealtimeSession
from services.session_client.relay_client import RealtimeSignaling, RelayClient
from services.session_client.turn_chat import TurnBasedChat
from utils.settings import ClientSettings

logger = logging.getLogger(__name__)


class SessionClient:
	"""Route user input to the realtime session when active, otherwise to turn-based chat."""

	def __init__(
		self,
		settings: ClientSettings,
		*,
		peer_factory: PeerConnectionFactory,
		media: MediaCapture,
		relay: Optional[RelayClient] = None,
		signaling: Optional[RealtimeSignaling] = None,
		audio_sink: Optional[AudioSink] = None,
		recognizer_factory: Optional[SpeechRecognizerFactory] = None,
		synthesizer: Optional[SpeechSynthesizer] = None,
		notifier: Optional[Notifier] = None,
	) -> None:
		self.settings = settings
		self.notifier = notifier or LoggingNotifier()
		self.relay = relay or RelayClient(settings.relay_base_url)
		self.signaling = signaling or RealtimeSignaling(settings.realtime_base_url, settings.realtime_model)
		self.synthesizer = synthesizer
		self.current_input = ""

		self.store = ConversationStore()
		self.enrichment = EnrichmentScheduler(
			self.relay,
			self.store,
			self.notifier,
			translation_enabled=settings.translation_enabled,
		)
		self.turns = TurnBasedChat(self.relay, self.store, self.enrichment, self.notifier)
		self.realtime = RealtimeSession(
			settings,
			relay=self.relay,
			signaling=self.signaling,
			peer_factory=peer_factory,
			media=media,
			audio_sink=audio_sink or NullAudioSink(),
			store=self.store,
			enrichment=self.enrichment,
			notifier=self.notifier,
		)
		self.dictation = Dictation(
			recognizer_factory,
			self.notifier,
			self._set_input,
			lang=settings.speech_locale,
		)

	@property
	def messages(self) -> List[Message]:
		return self.store.messages

	@property
	def explanations(self) -> List[Explanation]:
		return self.store.explanations

	@property
	def has_started(self) -> bool:
		return self.store.has_started

	@property
	def phase(self) -> SessionPhase:
		return self.realtime.phase

	@property
	def is_loading(self) -> bool:
		return self.turns.is_loading

	def _set_input(self, text: str) -> None:
		self.current_input = text

	async def submit(self, text: Optional[str] = None) -> Optional[Message]:
		"""Send ``text`` (or the current input) through the active mode.

		Returns the tutor reply in turn-based mode; realtime replies arrive later
		over the data channel, so None is returned there.
		"""
		text = (self.current_input if text is None else text).strip()
		if not text:
			return None
		if self.realtime.is_active:
			self.current_input = ""
			self.realtime.send_text(text)
			return None
		if self.turns.is_loading:
			return None
		self.current_input = ""
		return await self.turns.send(text)

	async def start_realtime(self) -> bool:
		return await self.realtime.start()

	def stop_realtime(self) -> None:
		self.realtime.stop()

	def start_dictation(self) -> bool:
		return self.dictation.start()

	def stop_dictation(self) -> None:
		self.dictation.stop()

	def speak(self, text: str) -> None:
		"""Read ``text`` aloud when a synthesizer is available."""
		if self.synthesizer is None:
			return
		self.synthesizer.speak(text, lang=self.settings.speech_locale, rate=self.settings.speech_rate)

	async def aclose(self) -> None:
		"""Stop the realtime session, cancel enrichment and close HTTP clients."""
		self.realtime.stop()
		self.enrichment.cancel_all()
		await self.relay.aclose()
		await self.signaling.aclose()
