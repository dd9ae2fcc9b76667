"""Client-side controller driving the chat UI state.

The controller owns one audio player and one background health poller.
``start()`` opens a shared HTTP client and begins polling. ``stop()`` cancels
the poller and closes the client. Calls made outside that window use a
short-lived client each.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Protocol

import httpx

from client.state import AppState, ResponseView, ServerStatus

LOGGER = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:5000/api"

GENERIC_FAILURE = "Failed to generate response. Please try again."
RATE_LIMITED = "API rate limit exceeded. Please wait a moment and try again."
AUTH_FAILED = "Vapi API authentication failed. Please check your API key configuration."
TIMED_OUT = "Request timed out. The AI is taking longer than usual to respond."
CANNOT_CONNECT = "Cannot connect to server. Please make sure the backend is running."
EMPTY_PROMPT = "Please enter a prompt!"
NOT_CONNECTED = "Server is not connected. Please check your backend."
NO_AUDIO = "No audio available to play"
INVALID_RESPONSE = "Invalid response from server"


class AudioPlayer(Protocol):
    """Single playback element bound to the current response."""

    def load(self, url: str | None) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class SilentPlayer:
    """Player that only records what it was asked to do."""

    def __init__(self) -> None:
        self.url: str | None = None
        self.playing = False

    def load(self, url: str | None) -> None:
        self.url = url
        self.playing = False

    def play(self) -> None:
        if not self.url:
            raise RuntimeError("No source loaded.")
        self.playing = True

    def pause(self) -> None:
        self.playing = False


class ChatController:
    def __init__(
        self,
        api_base_url: str = DEFAULT_API_BASE_URL,
        *,
        player: AudioPlayer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        health_interval: float = 30.0,
        health_timeout: float = 5.0,
        chat_timeout: float = 30.0,
    ) -> None:
        self.state = AppState()
        self._base_url = api_base_url.rstrip("/")
        self._player: AudioPlayer = player or SilentPlayer()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._health_interval = health_interval
        self._health_timeout = health_timeout
        self._chat_timeout = chat_timeout
        self._poller: asyncio.Task[None] | None = None

    @property
    def polling(self) -> bool:
        return self._poller is not None and not self._poller.done()

    async def start(self) -> None:
        """Open the shared HTTP client and run a health check now and every ``health_interval`` seconds."""

        if self.polling:
            return
        if self._http is None:
            self._http = httpx.AsyncClient(transport=self._transport)
        self._poller = asyncio.create_task(self._poll_health())

    async def stop(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poller
            self._poller = None
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        # Outside start()/stop() every call gets its own short-lived client.
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient(transport=self._transport) as client:
            yield client

    async def _poll_health(self) -> None:
        while True:
            try:
                await self.check_health()
            except Exception:
                LOGGER.exception("Health poll tick failed")
                self.state.server_status = "disconnected"
            await asyncio.sleep(self._health_interval)

    async def check_health(self) -> ServerStatus:
        """Ask the backend for its status. Any failure or unexpected body counts as disconnected."""

        try:
            async with self._session() as http:
                response = await http.get(
                    f"{self._base_url}/health", timeout=self._health_timeout
                )
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError(f"Unexpected health payload: {body!r}")
            status: ServerStatus = "connected" if body.get("status") else "disconnected"
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Server health check failed: %s", exc)
            status = "disconnected"
        self.state.server_status = status
        return status

    def set_prompt(self, prompt: str) -> None:
        self.state.prompt = prompt

    async def submit(self, prompt: str | None = None, system_message: str | None = None) -> ResponseView | None:
        """Send the current prompt. Returns the new response, or None on any failure."""

        state = self.state
        if prompt is not None:
            state.prompt = prompt
        if system_message is not None:
            state.system_message = system_message

        text = state.prompt.strip()
        if not text:
            state.error = EMPTY_PROMPT
            return None
        if state.server_status != "connected":
            state.error = NOT_CONNECTED
            return None
        if not state.can_submit:
            # A request is already in flight.
            return None

        state.loading = True
        state.error = None
        state.response = None
        self._reset_audio()

        payload: dict[str, str] = {"message": text}
        if state.system_message.strip():
            payload["systemMessage"] = state.system_message.strip()

        try:
            async with self._session() as http:
                response = await http.post(
                    f"{self._base_url}/chat", json=payload, timeout=self._chat_timeout
                )
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, dict) or not body.get("response"):
                raise ValueError(INVALID_RESPONSE)
        except Exception as exc:
            state.error = self._describe_failure(exc)
            LOGGER.error("Error generating response: %s", exc)
            return None
        finally:
            state.loading = False

        audio_name = body.get("audioFileName")
        reply = str(body["response"])
        view = ResponseView(
            text=reply,
            audio_url=f"{self._base_url}/audio/{audio_name}" if audio_name else None,
            timestamp=datetime.now(timezone.utc),
            prompt_length=len(text),
            response_length=len(reply),
        )
        state.response = view
        state.prompt = ""
        self._player.load(view.audio_url)
        return view

    def _describe_failure(self, exc: Exception) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            try:
                error_body = exc.response.json()
            except ValueError:
                error_body = None
            server_error = error_body.get("error") if isinstance(error_body, dict) else None
            if server_error:
                return str(server_error)
            if exc.response.status_code == 429:
                return RATE_LIMITED
            if exc.response.status_code == 401:
                return AUTH_FAILED
            return GENERIC_FAILURE
        if isinstance(exc, httpx.TimeoutException):
            return TIMED_OUT
        if isinstance(exc, httpx.NetworkError):
            self.state.server_status = "disconnected"
            return CANNOT_CONNECT
        if isinstance(exc, ValueError):
            return INVALID_RESPONSE
        return GENERIC_FAILURE

    def toggle_audio(self) -> bool:
        """Play or pause the response audio; returns the new playing flag."""

        state = self.state
        if state.response is None or not state.response.audio_url:
            state.error = NO_AUDIO
            return False

        if state.audio_playing:
            self._player.pause()
            state.audio_playing = False
            return False

        try:
            self._player.play()
        except Exception as exc:
            LOGGER.error("Audio playback failed: %s", exc)
            self.on_audio_error()
            return False
        state.audio_playing = True
        return True

    def on_audio_ended(self) -> None:
        self.state.audio_playing = False

    def on_audio_error(self) -> None:
        LOGGER.warning("Audio element reported a load or playback error")
        self.state.audio_playing = False

    def _reset_audio(self) -> None:
        if self.state.audio_playing:
            self._player.pause()
        self.state.audio_playing = False
