"""
TTS Relay - Main FastAPI Application

Downloads speech audio for a word from a TTS provider, keeps it on disk for a
short serving window and returns the URL the browser should play.

Run with ``tts-relay`` (socket activation aware) or
``uvicorn tts_relay.main:create_app --factory``.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from .api.endpoints.health import router as health_router
from .api.endpoints.tts import router as tts_router
from .constants import APP_NAME
from .core.config import Settings, get_settings, prepare_cache_directory
from .core.correlation import CorrelationIdMiddleware
from .core.exceptions import TTSRelayException
from .core.logging_config import configure_logging
from .core.socket_activation import resolve_listen_target
from .infrastructure.storage.file_cache_store import FileCacheStore
from .middleware.cors import AllowAllOriginsMiddleware
from .services.tts.orchestrator import TTSFetchOrchestrator
from .services.tts.provider_client import TTSProviderClient

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the cache store, provider client and orchestrator for the app."""
    settings: Settings = app.state.settings

    cache_dir = prepare_cache_directory(settings)

    http_client = app.state.http_client
    owns_http_client = http_client is None
    if owns_http_client:
        http_client = httpx.AsyncClient(
            timeout=settings.TTS_TIMEOUT_SECONDS, follow_redirects=True
        )

    store = FileCacheStore(cache_dir, extension=settings.CACHE_FILE_EXTENSION)
    # Files left by a process that was killed get the same retention as new ones
    store.sweep(settings.retention)

    provider = TTSProviderClient(
        http_client,
        provider_url=settings.TTS_PROVIDER_URL,
        user_agent=settings.TTS_USER_AGENT,
        client_id=settings.TTS_CLIENT_ID,
    )
    orchestrator = TTSFetchOrchestrator(
        store,
        provider,
        language=settings.TTS_LANGUAGE,
        retention=settings.retention,
        url_prefix=settings.CACHE_URL_PREFIX,
    )

    app.state.store = store
    app.state.orchestrator = orchestrator

    logger.info(
        "TTS relay started",
        version=settings.SERVICE_VERSION,
        environment=settings.ENVIRONMENT,
        cache_dir=str(cache_dir),
        retention=str(settings.retention),
        language=settings.TTS_LANGUAGE,
    )

    try:
        yield
    finally:
        logger.info("Shutting down TTS relay")
        await orchestrator.close()
        store.close()
        if owns_http_client:
            await http_client.aclose()


async def relay_exception_handler(request: Request, exc: TTSRelayException) -> PlainTextResponse:
    """Render relay errors as plain text with the mapped status code."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        error_code=exc.error_code,
        error=exc.message,
        details=exc.details,
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings (environment-derived by default)
        http_client: Client used for the provider; created and closed by the
            lifespan when omitted

    Returns:
        Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(
        title=APP_NAME,
        description="Transient text-to-speech download cache",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.http_client = http_client

    app.add_middleware(CorrelationIdMiddleware)
    # Added last so it wraps everything, including correlation handling
    app.add_middleware(AllowAllOriginsMiddleware)

    app.add_exception_handler(TTSRelayException, relay_exception_handler)

    app.include_router(tts_router, tags=["tts"])
    app.include_router(health_router, tags=["health"])

    if settings.SERVE_CACHE_FILES:
        app.mount(
            settings.CACHE_URL_PREFIX,
            StaticFiles(directory=settings.cache_dir, check_dir=False),
            name="tts_cache",
        )

    return app


def run() -> None:
    """Console entry point: serve on an inherited socket or the configured port."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    target = resolve_listen_target(settings)
    if target.is_socket_activated:
        logger.info("TTS relay listening on systemd socket", target=str(target))
    else:
        logger.info("TTS relay listening on port", target=str(target))

    config = uvicorn.Config(
        create_app(settings), log_config=None, **target.uvicorn_kwargs()
    )
    uvicorn.Server(config).run()


if __name__ == "__main__":
    run()
