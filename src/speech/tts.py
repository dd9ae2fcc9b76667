"""Text-to-speech synthesis backed by the public Google Translate TTS endpoint."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from config.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


class BaseSynthesizer(ABC):
    """Interface for all text-to-speech synthesizers."""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Return encoded audio for the given text."""


class GoogleTranslateSynthesizer(BaseSynthesizer):
    """Unauthenticated GET against the translate_tts endpoint.

    Only the first ``tts_max_chars`` characters are spoken; the endpoint
    rejects longer inputs.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._endpoint = settings.tts_endpoint
        self._language = settings.tts_language
        self._client_id = settings.tts_client
        self._max_chars = settings.tts_max_chars
        self._timeout = settings.tts_timeout_seconds
        self._user_agent = settings.tts_user_agent
        self._transport = transport

    def build_params(self, text: str) -> dict[str, str]:
        return {
            "ie": "UTF-8",
            "q": text[: self._max_chars],
            "tl": self._language,
            "client": self._client_id,
        }

    async def synthesize(self, text: str) -> bytes:
        LOGGER.debug("Requesting Google TTS audio for %d characters", len(text))
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(
                self._endpoint,
                params=self.build_params(text),
                headers={"User-Agent": self._user_agent},
            )
        response.raise_for_status()
        if not response.content:
            raise RuntimeError("Google TTS returned an empty body.")
        return response.content


def build_synthesizer(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseSynthesizer:
    """Factory returning the configured synthesizer."""

    return GoogleTranslateSynthesizer(settings, transport=transport)
