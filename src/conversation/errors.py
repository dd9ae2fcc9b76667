"""Domain-specific exceptions for the chat gateway.

These exceptions are safe to import from API layers without pulling in HTTP clients.
"""

from __future__ import annotations


class GatewayError(Exception):
    status_code: int = 500
    default_detail: str = "Gateway error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class InvalidRequestError(GatewayError):
    status_code = 400
    default_detail = "Invalid request"


class ProviderError(GatewayError):
    """Failure talking to the conversational AI provider.

    ``status`` holds the upstream HTTP status, or ``None`` for timeouts and
    network errors.
    """

    status_code = 502
    default_detail = "AI provider request failed."

    def __init__(self, detail: str | None = None, *, status: int | None = None) -> None:
        super().__init__(detail)
        self.status = status


class AssistantCreationError(ProviderError):
    default_detail = "Assistant creation failed."


class SynthesisFailedError(GatewayError):
    status_code = 503
    default_detail = "Failed to generate audio"
