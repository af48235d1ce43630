"""One-shot speech dictation into the input field."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from services.session_client.capabilities import Notifier, SpeechRecognizer, SpeechRecognizerFactory

logger = logging.getLogger(__name__)


class Dictation:
	"""Run a single non-continuous recognition and hand the transcript to ``on_transcript``.

	The transcript is never submitted automatically.
	"""

	def __init__(
		self,
		recognizer_factory: Optional[SpeechRecognizerFactory],
		notifier: Notifier,
		on_transcript: Callable[[str], None],
		*,
		lang: str = "en-US",
	) -> None:
		self.recognizer_factory = recognizer_factory
		self.notifier = notifier
		self.on_transcript = on_transcript
		self.lang = lang
		self.is_recording = False
		self._recognizer: Optional[SpeechRecognizer] = None

	def start(self) -> bool:
		recognizer = self.recognizer_factory() if self.recognizer_factory else None
		if recognizer is None:
			self.notifier.error("Speech recognition is not supported on this device.")
			return False
		recognizer.lang = self.lang
		recognizer.continuous = False
		recognizer.interim_results = False
		self._recognizer = recognizer
		self.is_recording = True
		try:
			recognizer.start(self._on_result, self._on_error, self._on_end)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			self._on_error(exc)
			return False
		return True

	def stop(self) -> None:
		if self._recognizer is not None:
			self._recognizer.stop()
		self.is_recording = False

	def _on_result(self, transcript: str) -> None:
		self.on_transcript(transcript)
		self.is_recording = False

	def _on_error(self, error: Any) -> None:
		logger.warning("Speech recognition failed: %s", error)
		self.is_recording = False
		self.notifier.error("Speech recognition failed. Please try again.")

	def _on_end(self) -> None:
		self.is_recording = False
