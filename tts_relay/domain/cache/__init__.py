"""
Cache Domain Module

Entities and value objects for the transient audio cache.
"""

from .entities import CacheEntry
from .value_objects import (
    CacheKey,
    EvictionOutcome,
    ResourceRef,
    RetentionWindow,
)

__all__ = [
    "CacheEntry",
    "CacheKey",
    "EvictionOutcome",
    "ResourceRef",
    "RetentionWindow",
]
