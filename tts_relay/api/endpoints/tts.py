"""
Text-to-speech download endpoint.

The browser asks for a word, receives the URL of an mp3 it can play, and
loads that file from the cache directory.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from ...services.tts.orchestrator import TTSFetchOrchestrator

logger = structlog.get_logger(__name__)
router = APIRouter()


class DownloadResponse(BaseModel):
    """Response schema for a resolved word."""

    file: str = Field(..., description="Relative URL of the cached audio file")

    model_config = {"json_schema_extra": {"example": {"file": "/tts_cache/Haus.mp3"}}}


def get_orchestrator(request: Request) -> TTSFetchOrchestrator:
    """Orchestrator created by the application lifespan."""
    return request.app.state.orchestrator


@router.get("/download_tts", response_model=DownloadResponse)
async def download_tts(
    word: Optional[str] = Query(default=None, description="Word or phrase to speak"),
    orchestrator: TTSFetchOrchestrator = Depends(get_orchestrator),
) -> DownloadResponse:
    """
    Download speech for ``word`` into the cache and return its URL.

    Errors are rendered by the application exception handler: 400 for a
    missing word, 500 for provider or storage failures.
    """
    logger.info("Request for word", word=word)
    ref = await orchestrator.resolve(word)
    return DownloadResponse(file=ref.path)
