"""Typed configuration for the relay and the session client."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.openai.prompts import (
    DEFAULT_CHAT_SYSTEM_PROMPT,
    DEFAULT_EXPLANATION_SYSTEM_PROMPT,
    DEFAULT_TRANSLATION_SYSTEM_PROMPT,
    DEFAULT_TUTOR_INSTRUCTIONS,
)


class RelaySettings(BaseSettings):
    """Credentials, endpoints and prompts used by the relay routes."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))

    # Realtime session issuance
    realtime_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_REALTIME_API_KEY", "realtime_api_key"),
    )
    realtime_endpoint: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_REALTIME_ENDPOINT", "realtime_endpoint"),
    )
    realtime_deployment_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_REALTIME_DEPLOYMENT_NAME", "realtime_deployment_name"),
    )
    realtime_api_version: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_REALTIME_API_VERSION", "realtime_api_version"),
    )
    realtime_voice: str = Field(default="verse", validation_alias=AliasChoices("REALTIME_VOICE", "realtime_voice"))

    # Chat completions
    chat_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_CHAT_API_KEY", "chat_api_key"),
    )
    chat_endpoint: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_CHAT_ENDPOINT", "chat_endpoint"),
    )
    chat_deployment_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_CHAT_DEPLOYMENT_NAME", "chat_deployment_name"),
    )
    chat_api_version: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AZURE_OPENAI_CHAT_API_VERSION", "chat_api_version"),
    )

    chat_system_prompt: Optional[str] = Field(
        default=DEFAULT_CHAT_SYSTEM_PROMPT,
        validation_alias=AliasChoices("CHAT_SYSTEM_PROMPT", "chat_system_prompt"),
    )
    translation_system_prompt: str = Field(
        default=DEFAULT_TRANSLATION_SYSTEM_PROMPT,
        validation_alias=AliasChoices("TRANSLATION_SYSTEM_PROMPT", "translation_system_prompt"),
    )
    explanation_system_prompt: str = Field(
        default=DEFAULT_EXPLANATION_SYSTEM_PROMPT,
        validation_alias=AliasChoices("EXPLANATION_SYSTEM_PROMPT", "explanation_system_prompt"),
    )
    chat_temperature: float = Field(
        default=0.7, validation_alias=AliasChoices("CHAT_TEMPERATURE", "chat_temperature")
    )
    translation_temperature: float = Field(
        default=0.3, validation_alias=AliasChoices("TRANSLATION_TEMPERATURE", "translation_temperature")
    )

    translation_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("TRANSLATION_ENABLED", "VITE_TRANSLATION_ENABLED", "translation_enabled"),
    )
    realtime_model: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REALTIME_MODEL", "VITE_REALTIME_MODEL", "realtime_model"),
    )

    @property
    def chat_configured(self) -> bool:
        return bool(
            self.chat_api_key and self.chat_endpoint and self.chat_deployment_name and self.chat_api_version
        )

    @property
    def realtime_configured(self) -> bool:
        return bool(self.realtime_api_key and self.realtime_endpoint and self.realtime_deployment_name)

    def realtime_sessions_url(self) -> str:
        """Return the provider URL that issues ephemeral realtime sessions."""
        if not self.realtime_endpoint:
            raise ValueError("AZURE_OPENAI_REALTIME_ENDPOINT is not configured.")
        base = self.realtime_endpoint.rstrip("/")
        return f"{base}/openai/realtimeapi/sessions"


class ClientSettings(BaseSettings):
    """Settings for the session client that talks to the relay and the realtime service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    relay_base_url: str = Field(
        default="http://localhost:3000", validation_alias=AliasChoices("RELAY_BASE_URL", "relay_base_url")
    )
    realtime_base_url: str = Field(
        default="",
        validation_alias=AliasChoices("REALTIME_BASE_URL", "VITE_REALTIME_BASE_URL", "realtime_base_url"),
    )
    realtime_model: str = Field(
        default="",
        validation_alias=AliasChoices("REALTIME_MODEL", "VITE_REALTIME_MODEL", "realtime_model"),
    )
    translation_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("TRANSLATION_ENABLED", "VITE_TRANSLATION_ENABLED", "translation_enabled"),
    )

    # session.update payload
    voice: str = "verse"
    instructions: str = DEFAULT_TUTOR_INSTRUCTIONS
    modalities: list[str] = Field(default_factory=lambda: ["text", "audio"])
    input_audio_format: str = "pcm16"
    output_audio_format: str = "pcm16"
    transcription_model: str = "whisper-1"
    turn_detection_type: str = "server_vad"
    vad_threshold: float = 0.5
    vad_prefix_padding_ms: int = 300
    vad_silence_duration_ms: int = 500
    data_channel_label: str = "oai-events"

    speech_locale: str = "en-US"
    speech_rate: float = 0.8

    guard_realtime_send: bool = Field(
        default=False,
        validation_alias=AliasChoices("GUARD_REALTIME_SEND", "guard_realtime_send"),
    )


@lru_cache
def get_settings() -> RelaySettings:
    """Return the process-wide relay settings."""
    return RelaySettings()
