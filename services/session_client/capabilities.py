"""Platform capabilities the session client depends on.

A browser build backs these with WebRTC, ``getUserMedia`` and the Web Speech
API; other targets supply their own equivalents with the same shape.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class MediaTrack(Protocol):
	"""A local or remote media track."""

	def stop(self) -> None: ...


class MediaCapture(Protocol):
	"""Access to the local microphone."""

	async def open_microphone(self) -> MediaTrack:
		"""Return an audio track; raise if permission is denied or no device exists."""
		...


class DataChannel(Protocol):
	"""Bidirectional event channel carried by the peer connection."""

	ready_state: str  # "connecting" | "open" | "closing" | "closed"

	def on(self, event: str, callback: Callable[..., Any]) -> None:
		"""Register ``callback`` for ``open``, ``message`` (str payload) or ``close``."""
		...

	def send(self, data: str) -> None: ...

	def close(self) -> None: ...


class PeerConnection(Protocol):
	"""A single WebRTC peer connection to the realtime service."""

	def on_track(self, callback: Callable[[Any], None]) -> None:
		"""Register ``callback`` to receive the first remote stream of each inbound track."""
		...

	def add_track(self, track: MediaTrack) -> None: ...

	def outbound_tracks(self) -> List[MediaTrack]: ...

	def create_data_channel(self, label: str) -> DataChannel: ...

	async def create_offer(self) -> str:
		"""Return the SDP text of a new local offer."""
		...

	async def set_local_description(self, sdp: str) -> None: ...

	async def set_remote_description(self, sdp: str) -> None:
		"""Apply the remote SDP answer."""
		...

	def close(self) -> None: ...


class AudioSink(Protocol):
	"""Plays the model's audio."""

	def attach(self, stream: Any) -> None: ...

	def detach(self) -> None: ...


class SpeechRecognizer(Protocol):
	"""One recognition session of the platform speech recognizer."""

	lang: str
	continuous: bool
	interim_results: bool

	def start(
		self,
		on_result: Callable[[str], None],
		on_error: Callable[[Any], None],
		on_end: Callable[[], None],
	) -> None: ...

	def stop(self) -> None: ...


class SpeechSynthesizer(Protocol):
	"""Text-to-speech output."""

	def speak(self, text: str, *, lang: str, rate: float) -> None: ...


PeerConnectionFactory = Callable[[], PeerConnection]
# Returns None when the platform has no speech recognition.
SpeechRecognizerFactory = Callable[[], Optional[SpeechRecognizer]]


class Notifier(Protocol):
	"""Transient user-facing notifications."""

	def success(self, message: str) -> None: ...

	def info(self, message: str) -> None: ...

	def error(self, message: str) -> None: ...


class LoggingNotifier:
	"""Notifier that writes notifications to the log."""

	def success(self, message: str) -> None:
		logger.info("[success] %s", message)

	def info(self, message: str) -> None:
		logger.info("[info] %s", message)

	def error(self, message: str) -> None:
		logger.error("[error] %s", message)


class NullAudioSink:
	"""Audio sink for targets without playback."""

	def __init__(self) -> None:
		self.stream: Any = None

	def attach(self, stream: Any) -> None:
		self.stream = stream

	def detach(self) -> None:
		self.stream = None
