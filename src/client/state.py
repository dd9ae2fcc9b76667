"""Shared state model for the chat client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

ServerStatus = Literal["checking", "connected", "disconnected"]
Phase = Literal["idle", "submitting", "showing-response", "showing-error"]

AI_PROVIDER = "Vapi AI"


@dataclass(slots=True)
class ResponseView:
    """Formatted chat reply as shown to the user."""

    text: str
    audio_url: str | None
    timestamp: datetime
    prompt_length: int
    response_length: int
    ai_provider: str = AI_PROVIDER


@dataclass(slots=True)
class AppState:
    """Global state for the client."""

    server_status: ServerStatus = "checking"
    prompt: str = ""
    system_message: str = ""
    loading: bool = False
    response: ResponseView | None = None
    error: str | None = None
    audio_playing: bool = False

    @property
    def phase(self) -> Phase:
        if self.loading:
            return "submitting"
        if self.error:
            return "showing-error"
        if self.response is not None:
            return "showing-response"
        return "idle"

    @property
    def can_submit(self) -> bool:
        return self.server_status == "connected" and bool(self.prompt.strip()) and not self.loading
