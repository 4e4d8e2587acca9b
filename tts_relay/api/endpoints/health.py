"""
Health check endpoints for the TTS relay.
"""

import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ...monitoring.metrics import render_latest

# Track process start time for uptime calculation
PROCESS_START_TIME = time.time()

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns a simple status for supervisors and load balancers, plus the
    state of the transient cache.
    """
    settings = request.app.state.settings
    store = request.app.state.store
    cache_dir = store.cache_dir

    return {
        "status": "healthy" if cache_dir.is_dir() else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "environment": settings.ENVIRONMENT,
        "uptime_seconds": round(time.time() - PROCESS_START_TIME, 3),
        "cache": {
            "directory": str(cache_dir),
            "pending_evictions": store.pending_evictions,
            "inflight_downloads": len(request.app.state.orchestrator.inflight),
        },
    }


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """Prometheus text exposition of relay counters."""
    return Response(content=render_latest(), media_type=CONTENT_TYPE_LATEST)
