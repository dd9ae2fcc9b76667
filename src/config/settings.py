"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, friendly, and knowledgeable AI assistant. "
    "Provide clear, concise, and engaging responses. "
    "Keep your answers informative but not too long."
)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Vapi conversational AI
    vapi_api_key: str | None = Field(
        default="44a43177-eed7-4ccf-a2f7-3d42a94507be",
        description="Bearer token for the Vapi API. The default is a shared demo key.",
    )
    vapi_base_url: str = Field(default="https://api.vapi.ai")
    vapi_timeout_seconds: float = Field(default=30.0, gt=0)

    # Assistant configuration sent once on creation
    assistant_name: str = Field(default="Conversational AI Assistant")
    assistant_first_message: str = Field(
        default="Hello! I'm your AI assistant. How can I help you today?"
    )
    assistant_model_provider: str = Field(default="openai")
    assistant_model: str = Field(default="gpt-3.5-turbo")
    assistant_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    assistant_system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    assistant_voice_provider: str = Field(default="11labs")
    assistant_voice_id: str = Field(default="21m00Tcm4TlvDq8ikWAM")

    # Text to speech
    tts_endpoint: str = Field(default="https://translate.google.com/translate_tts")
    tts_language: str = Field(default="en")
    tts_client: str = Field(default="tw-ob")
    tts_max_chars: int = Field(default=200, gt=0)
    tts_timeout_seconds: float = Field(default=15.0, gt=0)
    tts_user_agent: str = Field(
        default=DESKTOP_USER_AGENT,
        description="Browser user agent; the TTS endpoint blocks requests without one.",
    )

    audio_dir: Path = Field(default=Path("./public/audio"))

    @field_validator("audio_dir")
    @classmethod
    def ensure_audio_dir(cls, value: Path) -> Path:
        value.mkdir(parents=True, exist_ok=True)
        return value

    @property
    def has_vapi_key(self) -> bool:
        return bool(self.vapi_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
