"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules. Every factory is
cached so the process holds exactly one registry and one placeholder map.
"""

from __future__ import annotations

from functools import lru_cache

from config.settings import get_settings
from conversation.assistant_registry import AssistantRegistry
from conversation.chat_service import ChatService
from llm.vapi_client import VapiClient
from speech.audio_store import AudioGenerator, PlaceholderAudioMap, build_audio_generator


@lru_cache(maxsize=1)
def get_assistant_registry() -> AssistantRegistry:
    return AssistantRegistry()


@lru_cache(maxsize=1)
def get_vapi_client() -> VapiClient:
    return VapiClient(get_settings())


@lru_cache(maxsize=1)
def get_audio_generator() -> AudioGenerator:
    return build_audio_generator(get_settings())


@lru_cache(maxsize=1)
def get_placeholder_audio() -> PlaceholderAudioMap:
    return PlaceholderAudioMap()


@lru_cache(maxsize=1)
def _chat_service_factory() -> ChatService:
    return ChatService(get_vapi_client(), get_assistant_registry(), get_audio_generator())


def get_chat_service() -> ChatService:
    return _chat_service_factory()

