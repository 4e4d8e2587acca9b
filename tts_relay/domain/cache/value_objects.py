"""
Cache Value Objects

Immutable value objects for the audio cache domain.
Provides type safety and the canonical key derivation used for both the
on-disk file name and the caller-facing reference.
"""

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

# encodeURIComponent leaves these unreserved marks untouched as well
_URI_COMPONENT_SAFE = "!'()*"

_WHITESPACE = re.compile(r"\s+")


class EvictionOutcome(str, Enum):
    """Result of a single eviction attempt."""

    REMOVED = "removed"
    MISSING = "missing"
    FAILED = "failed"


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    The key is the raw text with every whitespace character removed. It names
    the audio file on disk, so it must also be a safe single path component.
    """

    value: str

    MAX_BYTES = 250
    FORBIDDEN_CHARACTERS = ("/", "\\", "\x00")

    def __post_init__(self) -> None:
        """Validate cache key format."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

        if len(self.value.encode("utf-8")) > self.MAX_BYTES:
            raise ValueError(f"Cache key too long (max {self.MAX_BYTES} bytes)")

        if any(char.isspace() for char in self.value):
            raise ValueError("Cache key cannot contain whitespace")

        if any(char in self.value for char in self.FORBIDDEN_CHARACTERS):
            raise ValueError("Cache key cannot contain path separators")

        if self.value in (".", ".."):
            raise ValueError("Cache key cannot be a relative path marker")

    @classmethod
    def from_text(cls, raw_text: str) -> "CacheKey":
        """Create cache key from raw request text."""
        return cls(_WHITESPACE.sub("", raw_text))

    @property
    def quoted(self) -> str:
        """Percent-encoded key, as used inside a URL path segment."""
        return quote(self.value, safe=_URI_COMPONENT_SAFE)

    def file_name(self, extension: str) -> str:
        """File name of the stored entry for this key."""
        return f"{self.value}.{extension}"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RetentionWindow:
    """
    Retention window value object for cache eviction.

    Fixed time an entry stays on disk after it is written.
    """

    seconds: float

    def __post_init__(self) -> None:
        """Validate retention value."""
        if self.seconds <= 0:
            raise ValueError("Retention window must be positive")
        if self.seconds > 86400:
            raise ValueError("Retention window too large (max 1 day)")

    @classmethod
    def default(cls) -> "RetentionWindow":
        """Default serving window (20 seconds)."""
        return cls(20)

    def __str__(self) -> str:
        return f"{self.seconds:g}s"


@dataclass(frozen=True)
class ResourceRef:
    """Caller-facing relative URL of a cached audio file."""

    path: str

    @classmethod
    def for_key(cls, key: CacheKey, url_prefix: str, extension: str) -> "ResourceRef":
        """Build the reference from the canonical key."""
        prefix = url_prefix.rstrip("/")
        return cls(f"{prefix}/{key.quoted}.{extension}")

    def __str__(self) -> str:
        return self.path
