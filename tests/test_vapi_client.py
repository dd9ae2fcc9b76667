from __future__ import annotations

import asyncio

import httpx
import pytest

from config.settings import Settings
from conversation.errors import AssistantCreationError, ProviderError
from llm.vapi_client import NO_CONTENT_FALLBACK, VapiClient, extract_text, parse_cost


def _settings(tmp_path) -> Settings:
    return Settings(audio_dir=tmp_path, vapi_api_key="secret", vapi_base_url="https://vapi.test/")


def test_extract_text_uses_first_output_item():
    payload = {"output": [{"content": "first"}, {"content": "second"}]}
    assert extract_text(payload) == "first"


@pytest.mark.parametrize(
    "payload",
    [{}, {"output": []}, {"output": [{"content": ""}]}, {"output": {"content": "x"}}, {"output": "x"}],
)
def test_extract_text_falls_back_when_provider_returns_nothing(payload):
    assert extract_text(payload) == NO_CONTENT_FALLBACK


def test_create_assistant_sends_fixed_configuration(tmp_path, fake_vapi):
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    assistant_id = asyncio.run(client.create_assistant())

    assert assistant_id == "asst-1"
    payload = fake_vapi.assistant_payloads[0]
    assert payload["name"] == "Conversational AI Assistant"
    assert payload["model"]["model"] == "gpt-3.5-turbo"
    assert payload["model"]["messages"][0]["role"] == "system"
    assert payload["voice"] == {"provider": "11labs", "voiceId": "21m00Tcm4TlvDq8ikWAM"}
    assert fake_vapi.auth_headers == ["Bearer secret"]


def test_create_assistant_failure_carries_status(tmp_path, fake_vapi):
    fake_vapi.assistant_status = 401
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    with pytest.raises(AssistantCreationError) as excinfo:
        asyncio.run(client.create_assistant())
    assert excinfo.value.status == 401


def test_chat_maps_response_shape(tmp_path, fake_vapi):
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    turn = asyncio.run(client.chat("asst-1", "Hello"))

    assert turn.text == "Hi there!"
    assert turn.chat_id == "c1"
    assert turn.cost == 0.002


def test_chat_without_cost_defaults_to_zero(tmp_path, fake_vapi):
    fake_vapi.chat_body = {"id": "c2", "output": [{"content": "ok"}]}
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    assert asyncio.run(client.chat("asst-1", "Hello")).cost == 0


def test_chat_timeout_becomes_provider_error_without_status(tmp_path, fake_vapi):
    fake_vapi.chat_timeout = True
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(client.chat("asst-1", "Hello"))
    assert excinfo.value.status is None


def test_chat_invalid_json_is_provider_error(tmp_path):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
    client = VapiClient(_settings(tmp_path), transport=transport)

    with pytest.raises(ProviderError):
        asyncio.run(client.chat("asst-1", "Hello"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 0.0), (0.25, 0.25), ("0.5", 0.5), ("n/a", 0.0), ({"total": 1}, 0.0), ("nan", 0.0)],
)
def test_parse_cost_tolerates_odd_values(value, expected):
    assert parse_cost(value) == expected


def test_chat_numeric_id_becomes_string(tmp_path, fake_vapi):
    fake_vapi.chat_body = {"id": 42, "output": [{"content": "ok"}], "cost": "free"}
    client = VapiClient(_settings(tmp_path), transport=fake_vapi.transport)

    turn = asyncio.run(client.chat("asst-1", "Hello"))

    assert turn.chat_id == "42"
    assert turn.cost == 0.0
