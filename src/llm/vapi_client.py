"""Client for the Vapi conversational AI REST API."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import httpx

from config.settings import Settings, get_settings
from conversation.errors import AssistantCreationError, ProviderError

LOGGER = logging.getLogger(__name__)

NO_CONTENT_FALLBACK = "Sorry, I couldn't generate a response."


@dataclass(frozen=True)
class ChatTurn:
    """Provider reply to a single chat input."""

    text: str
    chat_id: str | None
    cost: float


def extract_text(payload: dict[str, Any]) -> str:
    """Return the first output item's content, or a fixed fallback."""

    output = payload.get("output")
    if isinstance(output, list) and output and isinstance(output[0], dict):
        content = output[0].get("content")
        if content:
            return str(content)
    return NO_CONTENT_FALLBACK


def parse_cost(value: Any) -> float:
    """Numeric cost from the provider, 0 when absent or not a number."""

    try:
        cost = float(value or 0)
    except (TypeError, ValueError):
        cost = math.nan
    if not math.isfinite(cost):
        LOGGER.warning("Ignoring non-numeric Vapi cost: %r", value)
        return 0.0
    return cost


class VapiClient:
    """Minimal client for the assistant and chat endpoints."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._settings = settings
        self._base_url = settings.vapi_base_url.rstrip("/")
        self._api_key = settings.vapi_api_key
        self._timeout = settings.vapi_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def assistant_payload(self) -> dict[str, Any]:
        s = self._settings
        return {
            "name": s.assistant_name,
            "firstMessage": s.assistant_first_message,
            "model": {
                "provider": s.assistant_model_provider,
                "model": s.assistant_model,
                "temperature": s.assistant_temperature,
                "messages": [{"role": "system", "content": s.assistant_system_prompt}],
            },
            "voice": {
                "provider": s.assistant_voice_provider,
                "voiceId": s.assistant_voice_id,
            },
        }

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._base_url}{path}",
                    json=payload,
                    headers=self._headers(),
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "Vapi %s failed with %s: %s",
                path,
                exc.response.status_code,
                exc.response.text,
            )
            raise ProviderError(
                f"Vapi {path} returned {exc.response.status_code}",
                status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            LOGGER.error("Vapi %s request error: %s", path, exc)
            raise ProviderError(f"Vapi {path} request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"Vapi {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Vapi {path} returned an unexpected payload")
        return data

    async def create_assistant(self) -> str:
        LOGGER.info("Creating Vapi assistant...")
        try:
            data = await self._post("/assistant", self.assistant_payload())
        except ProviderError as exc:
            raise AssistantCreationError(exc.detail, status=exc.status) from exc

        assistant_id = data.get("id")
        if not assistant_id:
            raise AssistantCreationError("Assistant response contains no id.")
        LOGGER.info("Assistant created: %s", assistant_id)
        return str(assistant_id)

    async def chat(self, assistant_id: str, message: str) -> ChatTurn:
        data = await self._post("/chat", {"assistantId": assistant_id, "input": message})
        chat_id = data.get("id")
        return ChatTurn(
            text=extract_text(data),
            chat_id=str(chat_id) if chat_id is not None else None,
            cost=parse_cost(data.get("cost")),
        )
