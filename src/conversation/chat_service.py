"""Orchestration of a single chat turn: assistant, provider reply, audio."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from conversation.assistant_registry import AssistantRegistry
from conversation.errors import InvalidRequestError, ProviderError, SynthesisFailedError
from llm.vapi_client import VapiClient
from speech.audio_store import AudioGenerator

LOGGER = logging.getLogger(__name__)

PROVIDER_ERROR_MESSAGES: dict[int, str] = {
    400: "I had trouble understanding your request. Could you please rephrase it?",
    401: "There seems to be an authentication issue with the AI service. Please try again.",
    429: "I'm receiving a lot of requests right now. Please wait a moment and try again.",
}
GENERIC_ERROR_MESSAGE = (
    "I'm experiencing some technical difficulties. Please try again in a moment."
)


def provider_error_message(status: int | None) -> str:
    return PROVIDER_ERROR_MESSAGES.get(status, GENERIC_ERROR_MESSAGE)


@dataclass
class ChatResult:
    text: str
    audio_file_name: str | None = None
    chat_id: str | None = None
    cost: float | None = None
    degraded: bool = False


class ChatService:
    """High-level orchestrator for the chat pipeline.

    Provider failures never surface as errors: they become a ``ChatResult``
    with a user-readable text and no audio.
    """

    def __init__(
        self,
        client: VapiClient,
        registry: AssistantRegistry,
        audio: AudioGenerator,
    ) -> None:
        self._client = client
        self._registry = registry
        self._audio = audio

    @property
    def assistant_id(self) -> str | None:
        return self._registry.assistant_id

    async def ensure_assistant(self) -> str:
        return await self._registry.ensure(self._client.create_assistant)

    async def chat(self, message: str | None, system_message: str | None = None) -> ChatResult:
        text = (message or "").strip()
        if not text:
            raise InvalidRequestError("Message is required")

        if system_message:
            # Accepted for API compatibility; the assistant keeps its configured prompt.
            LOGGER.debug("Ignoring per-request system message override")

        try:
            assistant_id = await self.ensure_assistant()
            turn = await self._client.chat(assistant_id, text)
        except ProviderError as exc:
            LOGGER.exception("Vapi chat failed: %s", exc)
            return ChatResult(text=provider_error_message(exc.status), degraded=True)

        audio_file_name = await self._generate_audio(turn.text)
        return ChatResult(
            text=turn.text,
            audio_file_name=audio_file_name,
            chat_id=turn.chat_id,
            cost=turn.cost,
        )

    async def _generate_audio(self, text: str) -> str | None:
        try:
            return await self._audio.synthesize(text)
        except SynthesisFailedError as exc:
            LOGGER.warning("Audio generation failed: %s", exc)
            return None
