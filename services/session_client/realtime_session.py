"""Realtime voice session over a WebRTC peer connection.

The session moves ``IDLE -> ACTIVATING -> ACTIVE -> IDLE``. Activation
fetches an ephemeral key from the relay, negotiates the peer connection
directly with the realtime service and becomes active once the data channel
opens. Stopping, a closed channel and a failed activation all go through the
same teardown, which releases the channel, the local tracks and the peer
connection together.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from models.session_models import SessionPhase
from services.session_client.capabilities import (
	AudioSink,
	DataChannel,
	MediaCapture,
	MediaTrack,
	Notifier,
	PeerConnection,
	PeerConnectionFactory,
)
from services.session_client.conversation_store import ConversationStore
from services.session_client.enrichment import EnrichmentScheduler
from services.session_client.realtime_events import (
	AUDIO_TRANSCRIPT_DONE,
	INPUT_TRANSCRIPTION_COMPLETED,
	RESPONSE_DONE,
	response_create_event,
	session_update_event,
	user_text_item_event,
)
from services.session_client.relay_client import RealtimeSignaling, RelayClient, ephemeral_key
from services.session_client.response_parser import response_text_outputs
from utils.settings import ClientSettings

logger = logging.getLogger(__name__)

VOICE_CONTEXT = "(realtime voice conversation)"
TEXT_CONTEXT = "(realtime text conversation)"


class RealtimeSessionError(RuntimeError):
	"""Raised for invalid realtime session operations."""


class _Superseded(Exception):
	"""Activation was overtaken by a stop."""


class RealtimeSession:
	"""Own the single peer connection and data channel of the realtime mode."""

	def __init__(
		self,
		settings: ClientSettings,
		*,
		relay: RelayClient,
		signaling: RealtimeSignaling,
		peer_factory: PeerConnectionFactory,
		media: MediaCapture,
		audio_sink: AudioSink,
		store: ConversationStore,
		enrichment: EnrichmentScheduler,
		notifier: Notifier,
	) -> None:
		self.settings = settings
		self.relay = relay
		self.signaling = signaling
		self.peer_factory = peer_factory
		self.media = media
		self.audio_sink = audio_sink
		self.store = store
		self.enrichment = enrichment
		self.notifier = notifier

		self._phase = SessionPhase.IDLE
		self._peer: Optional[PeerConnection] = None
		self._channel: Optional[DataChannel] = None
		self._tracks: List[MediaTrack] = []
		self._awaiting_response = False
		self._attempt = 0

	@property
	def phase(self) -> SessionPhase:
		return self._phase

	@property
	def is_active(self) -> bool:
		return self._phase is SessionPhase.ACTIVE

	@property
	def is_activating(self) -> bool:
		return self._phase is SessionPhase.ACTIVATING

	@property
	def awaiting_response(self) -> bool:
		return self._awaiting_response

	async def start(self) -> bool:
		"""Negotiate a new session; return False if rejected or failed.

		Only valid from IDLE, so at most one peer connection ever exists.
		"""
		if self._phase is not SessionPhase.IDLE:
			logger.info("Ignoring realtime start while %s", self._phase.value)
			return False

		self._phase = SessionPhase.ACTIVATING
		self._attempt += 1
		attempt = self._attempt
		logger.info("Realtime session activating")
		try:
			await self._activate(attempt)
		except _Superseded:
			logger.info("Realtime activation abandoned after stop")
			return False
		except Exception as exc:  # pylint: disable=broad-exception-caught
			logger.exception("Failed to start realtime session")
			if attempt != self._attempt or self._phase is SessionPhase.IDLE:
				return False
			self._teardown()
			self.notifier.error(f"Failed to start realtime session: {exc}")
			return False
		return True

	async def _activate(self, attempt: int) -> None:
		session = await self.relay.fetch_token()
		self._check_current(attempt)
		key = ephemeral_key(session)

		peer = self.peer_factory()
		self._peer = peer
		peer.on_track(self.audio_sink.attach)

		track = await self.media.open_microphone()
		self._check_current(attempt, track)
		self._tracks.append(track)
		peer.add_track(track)

		channel = peer.create_data_channel(self.settings.data_channel_label)
		self._channel = channel
		channel.on("open", lambda *_: self._handle_open(channel))
		channel.on("message", lambda data: self._handle_message(channel, data))
		channel.on("close", lambda *_: self._handle_close(channel))

		offer = await peer.create_offer()
		self._check_current(attempt)
		await peer.set_local_description(offer)
		self._check_current(attempt)

		answer = await self.signaling.exchange(offer, key)
		self._check_current(attempt)
		await peer.set_remote_description(answer)
		self._check_current(attempt)

	def _check_current(self, attempt: int, track: Optional[MediaTrack] = None) -> None:
		"""Abort activation if a stop happened while awaiting."""
		if attempt == self._attempt and self._phase is not SessionPhase.IDLE:
			return
		if track is not None:
			track.stop()
		raise _Superseded()

	def stop(self) -> None:
		"""End the session. Stopping an idle session does nothing."""
		if self._phase is SessionPhase.IDLE:
			return
		self._teardown()

	def _teardown(self) -> None:
		channel, peer, tracks = self._channel, self._peer, self._tracks
		self._channel = None
		self._peer = None
		self._tracks = []
		self._awaiting_response = False
		self._phase = SessionPhase.IDLE

		if channel is not None and channel.ready_state in ("connecting", "open"):
			channel.close()
		stopped = set()
		outbound = list(peer.outbound_tracks()) if peer is not None else []
		for track in [*tracks, *outbound]:
			if id(track) in stopped:
				continue
			stopped.add(id(track))
			track.stop()
		if peer is not None:
			peer.close()
		self.audio_sink.detach()
		logger.info("Realtime session torn down")

	def _handle_open(self, channel: DataChannel) -> None:
		if channel is not self._channel or self._phase is not SessionPhase.ACTIVATING:
			return
		self._phase = SessionPhase.ACTIVE
		self.store.clear_events()
		channel.send(json.dumps(session_update_event(self.settings)))
		logger.info("Realtime session active")
		self.notifier.success("Realtime session started")

	def _handle_close(self, channel: DataChannel) -> None:
		if channel is not self._channel:
			return
		was_active = self._phase is SessionPhase.ACTIVE
		self._teardown()
		if was_active:
			self.notifier.info("Realtime session ended")
		else:
			self.notifier.error("Failed to start realtime session: data channel closed before opening")

	def _handle_message(self, channel: DataChannel, data: Any) -> None:
		if channel is not self._channel:
			return
		try:
			event = json.loads(data)
		except (TypeError, ValueError):
			logger.warning("Dropping malformed realtime frame: %r", data)
			return
		if not isinstance(event, dict):
			logger.warning("Dropping non-object realtime frame: %r", data)
			return
		self.store.log_event(event)
		self.dispatch(event)

	def dispatch(self, event: Dict[str, Any]) -> None:
		"""Apply an inbound realtime event to the conversation."""
		event_type = event.get("type")
		if event_type == AUDIO_TRANSCRIPT_DONE:
			transcript = event.get("transcript")
			if isinstance(transcript, str) and transcript.strip():
				# The learner's own transcription may still be in flight here.
				self._append_ai(transcript, prefix="ai", context=VOICE_CONTEXT)
		elif event_type == INPUT_TRANSCRIPTION_COMPLETED:
			transcript = event.get("transcript")
			if isinstance(transcript, str) and transcript.strip():
				self.store.add_message(transcript, is_user=True)
		elif event_type == RESPONSE_DONE:
			self._awaiting_response = False
			for text in response_text_outputs(event):
				self._append_ai(text, prefix="ai-text", context=self.store.last_user_text() or TEXT_CONTEXT)

	def _append_ai(self, text: str, *, prefix: str, context: str) -> None:
		message = self.store.add_message(text, is_user=False, prefix=prefix)
		self.enrichment.schedule(message, context)

	def send_event(self, event: Dict[str, Any]) -> bool:
		"""Send an outbound event over the open channel and log it."""
		channel = self._channel
		if channel is None or channel.ready_state != "open":
			logger.error("Failed to send message - no data channel available: %s", event.get("type"))
			return False
		event.setdefault("event_id", str(uuid4()))
		channel.send(json.dumps(event))
		self.store.log_event(event)
		return True

	def send_text(self, text: str) -> bool:
		"""Append ``text`` as a user message and ask the model to respond.

		Raises RealtimeSessionError when the session is not active.
		"""
		if self._phase is not SessionPhase.ACTIVE:
			raise RealtimeSessionError("Realtime session is not active.")
		text = (text or "").strip()
		if not text:
			return False
		if self.settings.guard_realtime_send and self._awaiting_response:
			self.notifier.info("Please wait for the current reply.")
			return False

		self.store.add_message(text, is_user=True, prefix="user-text")
		sent = self.send_event(user_text_item_event(text))
		if sent and self.send_event(response_create_event()):
			self._awaiting_response = True
		return sent
