"""
Cross-Origin Headers Middleware

Pages served by a separate web server call the relay from the browser, so
every response carries a permissive Access-Control-Allow-Origin header,
whether or not the request sent an Origin header.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp
from typing import Callable

logger = structlog.get_logger(__name__)


class AllowAllOriginsMiddleware(BaseHTTPMiddleware):
    """Add ``Access-Control-Allow-Origin`` to all responses."""

    def __init__(self, app: ASGIApp, allow_origin: str = "*"):
        super().__init__(app)
        self.allow_origin = allow_origin

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add the cross-origin header to the response.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or endpoint handler

        Returns:
            Response with the cross-origin header added
        """
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = self.allow_origin
        return response
