"""
TTS Relay Correlation ID Middleware

Implements correlation ID management for request tracking in logs.

Features:
- Automatic UUID v4 correlation ID generation for new requests
- Respects a well-formed correlation ID from request headers
- Adds correlation ID to response headers
- Binds the ID into structlog context variables for the request
"""

import re
import uuid
from typing import Optional, Callable, Awaitable

import structlog
from fastapi import Request
from starlette.types import ASGIApp
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from ..constants import CORRELATION_ID_HEADER

logger = structlog.get_logger(__name__)

_VALID_ID = re.compile(r"^[a-zA-Z0-9\-_\.]{8,255}$")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware for managing correlation IDs in HTTP requests.

    Generates or extracts a correlation ID, binds it to the logging context
    and returns it in the response headers.
    """

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_ID_HEADER):
        """
        Initialize correlation ID middleware.

        Args:
            app: ASGI application
            header_name: Header name for correlation ID
        """
        super().__init__(app)
        self.header_name = header_name.lower()

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[StarletteResponse]],
    ) -> StarletteResponse:
        """
        Process request and manage correlation ID.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware in chain

        Returns:
            HTTP response with correlation ID headers
        """
        correlation_id = self._extract_or_generate_correlation_id(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.error("Unexpected error during request processing", exc_info=True)
            raise

        response.headers[self.header_name] = correlation_id
        logger.info("Request completed", status_code=response.status_code)
        return response

    def _extract_or_generate_correlation_id(self, request: Request) -> str:
        """
        Extract correlation ID from request or generate new one.

        Args:
            request: HTTP request

        Returns:
            Correlation ID string
        """
        correlation_id = self._extract_from_headers(request)

        if correlation_id and not self._is_valid_correlation_id(correlation_id):
            logger.warning(
                "Invalid correlation ID format in request header, generating new one",
                received_correlation_id=correlation_id[:64],
            )
            correlation_id = None

        return correlation_id or str(uuid.uuid4())

    def _extract_from_headers(self, request: Request) -> Optional[str]:
        # Check multiple possible header names (case-insensitive)
        for header_name in (self.header_name, "x-request-id", "request-id"):
            value = request.headers.get(header_name, "").strip()
            if value:
                return value
        return None

    @staticmethod
    def _is_valid_correlation_id(correlation_id: str) -> bool:
        return bool(_VALID_ID.match(correlation_id))
