"""FastAPI routes exposing the chat gateway."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from api.dependencies import get_chat_service, get_placeholder_audio
from api.schemas import (
    AudioGenerateRequest,
    AudioGenerateResponse,
    AudioPlaceholderResponse,
    ChatRequest,
    ChatResponse,
    ConfigResponse,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
)
from config.settings import get_settings
from conversation.chat_service import ChatService
from conversation.errors import InvalidRequestError
from speech.audio_store import PlaceholderAudioMap

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(service: ChatService = Depends(get_chat_service)) -> HealthResponse:
    return HealthResponse(
        hasVapiKey=get_settings().has_vapi_key,
        assistantId=service.assistant_id,
    )


@router.post("/chat", response_model=ChatResponse, response_model_exclude_unset=True)
async def chat(
    payload: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    result = await service.chat(payload.message, payload.systemMessage)
    if result.degraded:
        return ChatResponse(response=result.text, audioFileName=None)
    return ChatResponse(
        response=result.text,
        audioFileName=result.audio_file_name,
        chatId=result.chat_id,
        cost=result.cost or 0,
    )


@router.post("/audio/generate", response_model=AudioGenerateResponse)
async def generate_audio(
    payload: AudioGenerateRequest,
    placeholders: PlaceholderAudioMap = Depends(get_placeholder_audio),
) -> AudioGenerateResponse:
    if not payload.text:
        raise InvalidRequestError("Text is required")
    return AudioGenerateResponse(audioFileName=placeholders.register(payload.text))


def _resolve_audio_file(filename: str) -> Path | None:
    audio_dir = get_settings().audio_dir.resolve()
    candidate = (audio_dir / filename).resolve()
    if candidate.parent != audio_dir or not candidate.is_file():
        return None
    return candidate


@router.get("/audio/{filename}", response_model=None)
async def get_audio(
    filename: str,
    placeholders: PlaceholderAudioMap = Depends(get_placeholder_audio),
) -> FileResponse | JSONResponse:
    text = placeholders.get(filename)
    if text is not None:
        return JSONResponse(AudioPlaceholderResponse(text=text).model_dump())

    path = _resolve_audio_file(filename)
    if path is None:
        return JSONResponse(
            status_code=404, content=ErrorResponse(error="Audio file not found").model_dump()
        )
    return FileResponse(path)


@router.delete("/cleanup", response_model=MessageResponse)
async def cleanup(
    placeholders: PlaceholderAudioMap = Depends(get_placeholder_audio),
) -> MessageResponse:
    removed = placeholders.clear()
    LOGGER.info("Cleared %d placeholder audio entries", removed)
    return MessageResponse(message="Cleanup successful")


@router.get("/config", response_model=ConfigResponse)
async def read_config(service: ChatService = Depends(get_chat_service)) -> ConfigResponse:
    settings = get_settings()
    return ConfigResponse(
        apiConfigured=settings.has_vapi_key,
        baseUrl=settings.vapi_base_url,
        assistantId=service.assistant_id,
    )
