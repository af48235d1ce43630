"""Event names and outbound event builders for the realtime data channel."""

from __future__ import annotations

from typing import Any, Dict

from utils.settings import ClientSettings

AUDIO_TRANSCRIPT_DONE = "response.audio_transcript.done"
INPUT_TRANSCRIPTION_COMPLETED = "conversation.item.input_audio_transcription.completed"
RESPONSE_DONE = "response.done"
SESSION_UPDATE = "session.update"
CONVERSATION_ITEM_CREATE = "conversation.item.create"
RESPONSE_CREATE = "response.create"


def session_update_event(settings: ClientSettings) -> Dict[str, Any]:
	"""Return the one-time session configuration sent when the channel opens."""
	return {
		"type": SESSION_UPDATE,
		"session": {
			"modalities": list(settings.modalities),
			"instructions": settings.instructions,
			"voice": settings.voice,
			"input_audio_format": settings.input_audio_format,
			"output_audio_format": settings.output_audio_format,
			"input_audio_transcription": {"model": settings.transcription_model},
			"turn_detection": {
				"type": settings.turn_detection_type,
				"threshold": settings.vad_threshold,
				"prefix_padding_ms": settings.vad_prefix_padding_ms,
				"silence_duration_ms": settings.vad_silence_duration_ms,
			},
		},
	}


def user_text_item_event(text: str) -> Dict[str, Any]:
	return {
		"type": CONVERSATION_ITEM_CREATE,
		"item": {
			"type": "message",
			"role": "user",
			"content": [{"type": "input_text", "text": text}],
		},
	}


def response_create_event() -> Dict[str, Any]:
	return {"type": RESPONSE_CREATE}
