"""
Middleware modules for request/response processing.

Includes:
- Permissive cross-origin header on every response
- Correlation ID tracking lives in core.correlation
"""

from .cors import AllowAllOriginsMiddleware

__all__ = [
    "AllowAllOriginsMiddleware",
]
