"""
Cache Domain Entities

Core domain entity for a stored audio clip. An entry is written once and
never mutated; it disappears when its eviction fires.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from .value_objects import CacheKey, RetentionWindow


@dataclass(frozen=True)
class CacheEntry:
    """
    Audio cache entry entity.

    Represents one audio file in the cache directory.
    """

    key: CacheKey
    file_path: Path
    created_at: datetime = field(default_factory=datetime.utcnow)
    size_bytes: int = 0

    def __post_init__(self) -> None:
        if not self.file_path.is_absolute():
            raise ValueError("Cache entry path must be absolute")

    def expires_at(self, retention: RetentionWindow) -> datetime:
        """Moment the scheduled eviction removes this entry."""
        return self.created_at + timedelta(seconds=retention.seconds)

    def is_expired(self, retention: RetentionWindow) -> bool:
        """Check if the retention window has elapsed."""
        return datetime.utcnow() >= self.expires_at(retention)
