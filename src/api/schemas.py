"""API-facing Pydantic models.

Field names follow the camelCase JSON contract the frontend consumes.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str | None = None
    systemMessage: str | None = Field(
        default=None, description="Accepted but not forwarded to the provider."
    )


class ChatResponse(BaseModel):
    response: str
    audioFileName: str | None = None
    chatId: str | None = None
    cost: float | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Server is running"
    aiProvider: str = "Vapi AI"
    hasVapiKey: bool
    assistantId: str | None = None


class ConfigResponse(BaseModel):
    message: str = "Vapi AI Configuration"
    apiConfigured: bool
    baseUrl: str
    assistantId: str | None = None


class AudioGenerateRequest(BaseModel):
    text: str | None = None


class AudioGenerateResponse(BaseModel):
    audioFileName: str


class AudioPlaceholderResponse(BaseModel):
    message: str = "Audio placeholder"
    text: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
