"""Entry point for the voice chat gateway service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.routes import router as api_router
from config.settings import get_settings
from conversation.errors import GatewayError

LOGGER = logging.getLogger(__name__)

WEB_DIR = Path(__file__).resolve().parent / "web"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    LOGGER.info("Server running on port %s", settings.port)
    LOGGER.info("Vapi API key configured: %s", settings.has_vapi_key)
    LOGGER.info("Vapi base URL: %s", settings.vapi_base_url)
    LOGGER.info("Health check: http://localhost:%s/api/health", settings.port)
    yield


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Voice Chat Gateway",
    description="Text chat with a hosted AI assistant, answered with synthesized speech.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


app.include_router(api_router, prefix="/api")
app.mount("/audio", StaticFiles(directory=settings.audio_dir), name="audio")
# Serve the single-page client last so it never shadows the API.
app.mount("/", StaticFiles(directory=WEB_DIR, html=True), name="web")


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
