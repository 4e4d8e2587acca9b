"""
TTS Fetch Orchestrator

Resolves a word to a playable audio reference: answers from the cache when
the file is already on disk, otherwise downloads it once, stores it and
schedules its eviction.
"""

from typing import Optional

import structlog

from ...core.exceptions import (
    InvalidInputException,
    StorageException,
    TTSRelayException,
    UpstreamException,
    UpstreamTransportException,
)
from ...domain.cache.entities import CacheEntry
from ...domain.cache.value_objects import CacheKey, ResourceRef, RetentionWindow
from ...infrastructure.storage.file_cache_store import FileCacheStore
from ...monitoring import metrics
from .inflight import InFlightRegistry
from .provider_client import TTSProviderClient

logger = structlog.get_logger(__name__)


class TTSFetchOrchestrator:
    """
    Fetch-cache-evict flow for a single word.

    Request states: received, validated, then either a cache hit or a miss
    that fetches, stores and schedules eviction; the request ends responded
    or failed. Failures are never retried.
    """

    def __init__(
        self,
        store: FileCacheStore,
        provider: TTSProviderClient,
        language: str = "de",
        retention: Optional[RetentionWindow] = None,
        url_prefix: str = "/tts_cache",
    ):
        self.store = store
        self.provider = provider
        self.language = language
        self.retention = retention or RetentionWindow.default()
        self.url_prefix = url_prefix
        self.inflight = InFlightRegistry()

    def cache_key(self, raw_text: Optional[str]) -> CacheKey:
        """
        Validate raw text and derive its cache key.

        Raises:
            InvalidInputException: Text is missing, blank or unusable as a key
        """
        if not raw_text or not raw_text.strip():
            raise InvalidInputException()
        try:
            return CacheKey.from_text(raw_text)
        except ValueError as e:
            raise InvalidInputException(f"Invalid word: {e}", text=raw_text) from e

    def reference_for(self, key: CacheKey) -> ResourceRef:
        return ResourceRef.for_key(key, self.url_prefix, self.store.extension)

    async def resolve(self, raw_text: Optional[str], lang: Optional[str] = None) -> ResourceRef:
        """
        Resolve ``raw_text`` to a caller-facing reference.

        Args:
            raw_text: Word or phrase as received
            lang: Target language; the configured language by default

        Returns:
            Relative URL of the cached audio file

        Raises:
            InvalidInputException: Text missing or invalid
            UpstreamException: Provider returned a non-success status
            UpstreamTransportException: Provider unreachable
            StorageException: Cache directory unreadable or local write failed
        """
        try:
            key = self.cache_key(raw_text)
        except InvalidInputException:
            metrics.resolve_requests_total.labels(outcome="invalid").inc()
            raise

        ref = self.reference_for(key)

        if self.store.exists(key) and self._track(key):
            metrics.resolve_requests_total.labels(outcome="hit").inc()
            logger.debug("Cache hit", key=str(key))
            return ref

        language = lang or self.language
        try:
            entry, joined = await self.inflight.run(
                key, lambda: self._fetch_and_store(key, raw_text, language)
            )
        except TTSRelayException:
            metrics.resolve_requests_total.labels(outcome="error").inc()
            raise

        metrics.resolve_requests_total.labels(outcome="shared" if joined else "miss").inc()
        logger.info(
            "Audio ready",
            key=str(key),
            size_bytes=entry.size_bytes,
            expires_at=entry.expires_at(self.retention).isoformat(),
            shared=joined,
        )
        return ref

    async def close(self) -> None:
        """Cancel downloads still in flight."""
        await self.inflight.close()

    def _track(self, key: CacheKey) -> bool:
        """Make sure an on-disk entry has a pending eviction; False if it expired."""
        if self.store.scheduler.is_scheduled(key):
            return True
        return self.store.adopt(key, self.retention) is not None

    async def _fetch_and_store(self, key: CacheKey, text: str, lang: str) -> CacheEntry:
        logger.info("Fetching speech from provider", key=str(key), lang=lang)
        try:
            async with self.provider.stream_speech(text, lang) as chunks:
                entry = await self.store.put(key, chunks)
        except UpstreamException:
            metrics.upstream_fetches_total.labels(outcome="http_error").inc()
            raise
        except UpstreamTransportException:
            metrics.upstream_fetches_total.labels(outcome="transport_error").inc()
            raise
        except StorageException as e:
            metrics.upstream_fetches_total.labels(outcome="storage_error").inc()
            logger.error("Failed to store audio", key=str(key), error=e.message)
            raise

        metrics.upstream_fetches_total.labels(outcome="success").inc()
        self.store.schedule_evict(key, self.retention)
        return entry
