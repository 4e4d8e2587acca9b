"""
TTS Relay Exceptions

Domain-specific exceptions for the fetch-cache-evict flow.
Every request-path failure is raised as one of these and rendered to the
caller by the application exception handler.
"""

from typing import Optional, Any, Dict


class TTSRelayException(Exception):
    """Base exception for relay errors.

    Carries a stable error code, structured details for logging and the HTTP
    status the caller should receive.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputException(TTSRelayException):
    """Raised when the requested text is missing or cannot form a cache key."""

    status_code = 400

    def __init__(self, message: str = "Missing word", text: Optional[str] = None):
        details = {}
        if text is not None:
            details["text"] = text

        super().__init__(message=message, error_code="INVALID_INPUT", details=details)


class UpstreamException(TTSRelayException):
    """Raised when the TTS provider answers with a non-success status."""

    def __init__(self, status: int, url: Optional[str] = None):
        details: Dict[str, Any] = {"status": status}
        if url:
            details["url"] = url

        super().__init__(
            message=f"Failed to download TTS: {status}",
            error_code="UPSTREAM_ERROR",
            details=details,
        )
        self.status = status


class UpstreamTransportException(TTSRelayException):
    """Raised when the TTS provider cannot be reached or the body read fails."""

    def __init__(
        self,
        message: str = "TTS provider unreachable",
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="UPSTREAM_TRANSPORT_ERROR", details=details
        )
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class StorageException(TTSRelayException):
    """Raised when reading or writing an audio file in the cache directory fails."""

    def __init__(
        self,
        operation: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"operation": operation}
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        message = f"Cache {operation} failed"
        if original_error:
            message = f"{message}: {original_error}"

        super().__init__(message=message, error_code="STORAGE_ERROR", details=details)
        if original_error:
            self.__cause__ = original_error
