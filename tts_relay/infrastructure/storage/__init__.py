"""
Filesystem storage for cached audio.
"""

from .eviction import EvictionScheduler
from .file_cache_store import FileCacheStore

__all__ = ["EvictionScheduler", "FileCacheStore"]
