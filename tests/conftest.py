from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

FAKE_AUDIO = b"ID3\x04\x00fake-mp3-bytes"


class FakeVapi:
    """In-process stand-in for the Vapi REST API."""

    def __init__(self) -> None:
        self.assistant_calls = 0
        self.assistant_status = 201
        self.assistant_payloads: list[dict] = []
        self.chat_payloads: list[dict] = []
        self.chat_status = 200
        self.chat_body: dict = {
            "id": "c1",
            "output": [{"content": "Hi there!"}],
            "cost": 0.002,
        }
        self.chat_timeout = False
        self.auth_headers: list[str | None] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.auth_headers.append(request.headers.get("Authorization"))
        if request.url.path == "/assistant":
            self.assistant_calls += 1
            self.assistant_payloads.append(json.loads(request.content))
            if self.assistant_status >= 400:
                return httpx.Response(self.assistant_status, json={"message": "rejected"})
            return httpx.Response(self.assistant_status, json={"id": "asst-1"})
        if request.url.path == "/chat":
            self.chat_payloads.append(json.loads(request.content))
            if self.chat_timeout:
                raise httpx.ReadTimeout("timed out", request=request)
            if self.chat_status >= 400:
                return httpx.Response(self.chat_status, json={"message": "error"})
            return httpx.Response(self.chat_status, json=self.chat_body)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeTTS:
    """Stand-in for the translate_tts endpoint."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(503, content=b"unavailable")
        return httpx.Response(200, content=FAKE_AUDIO, headers={"Content-Type": "audio/mpeg"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(scope="session")
def app(tmp_path_factory: pytest.TempPathFactory):
    tmp_dir = tmp_path_factory.mktemp("runtime")

    # Must be set before importing modules that read settings.
    os.environ["AUDIO_DIR"] = str(tmp_dir / "audio")
    os.environ["VAPI_API_KEY"] = "test-key"

    import importlib

    # Ensure clean import with the test settings.
    for module_name in [
        "config.settings",
        "conversation.errors",
        "conversation.assistant_registry",
        "conversation.chat_service",
        "llm.vapi_client",
        "speech.tts",
        "speech.audio_store",
        "api.dependencies",
        "api.routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def audio_dir(app) -> Path:
    from config.settings import get_settings

    return get_settings().audio_dir


@pytest.fixture()
def fake_vapi() -> FakeVapi:
    return FakeVapi()


@pytest.fixture()
def fake_tts() -> FakeTTS:
    return FakeTTS()


@pytest.fixture()
def chat_service(app, fake_vapi, fake_tts):
    from config.settings import get_settings
    from conversation.assistant_registry import AssistantRegistry
    from conversation.chat_service import ChatService
    from llm.vapi_client import VapiClient
    from speech.audio_store import build_audio_generator
    from speech.tts import GoogleTranslateSynthesizer

    settings = get_settings()
    synthesizer = GoogleTranslateSynthesizer(settings, transport=fake_tts.transport)
    return ChatService(
        VapiClient(settings, transport=fake_vapi.transport),
        AssistantRegistry(),
        build_audio_generator(settings, synthesizer),
    )


@pytest.fixture()
def placeholders(app):
    from speech.audio_store import PlaceholderAudioMap

    return PlaceholderAudioMap()


@pytest.fixture()
def client(app, chat_service, placeholders):
    # Override dependencies so tests never reach the real Vapi or Google endpoints.
    import api.dependencies as deps

    app.dependency_overrides[deps.get_chat_service] = lambda: chat_service
    app.dependency_overrides[deps.get_placeholder_audio] = lambda: placeholders

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
