"""
File Cache Store

Filesystem-backed key-value store mapping a cache key to an audio file.
Presence of the file is the whole index; there is no metadata sidecar.

Features:
- Atomic writes: chunks go to a hidden temp file that is moved into place
- Fixed 0644 permissions so a front web server can read the files
- Per-entry timed eviction; removal failures are logged, never raised
"""

import asyncio
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import AsyncIterable, Optional, Union

import structlog

from ...core.exceptions import StorageException
from ...domain.cache.entities import CacheEntry
from ...domain.cache.value_objects import CacheKey, EvictionOutcome, RetentionWindow
from ...monitoring import metrics
from .eviction import EvictionScheduler

logger = structlog.get_logger(__name__)

FILE_MODE = 0o644
TEMP_PREFIX = ".tts-"
TEMP_SUFFIX = ".part"


class FileCacheStore:
    """
    Transient audio cache rooted at a single directory.

    The store is the only component that creates or deletes files in the
    cache directory.
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        extension: str = "mp3",
        scheduler: Optional[EvictionScheduler] = None,
    ):
        """
        Initialize store.

        Args:
            cache_dir: Existing cache directory
            extension: File extension of stored entries
            scheduler: Eviction scheduler; one bound to this store by default
        """
        self.cache_dir = Path(cache_dir).resolve()
        self.extension = extension
        self.scheduler = scheduler or EvictionScheduler(self.evict)

    def path_for(self, key: CacheKey) -> Path:
        """Absolute path of the file for ``key``."""
        return self.cache_dir / key.file_name(self.extension)

    def exists(self, key: CacheKey) -> bool:
        """
        True iff a file for ``key`` is currently on disk.

        Raises:
            StorageException: The cache directory cannot be inspected
        """
        path = self.path_for(key)
        try:
            return path.is_file()
        except OSError as e:
            raise StorageException("stat", str(path), e) from e

    async def put(self, key: CacheKey, chunks: AsyncIterable[bytes]) -> CacheEntry:
        """
        Store the streamed bytes as the entry for ``key``.

        Nothing becomes visible at the final path unless the whole stream was
        written. If ``chunks`` raises, the temp file is removed and the error
        propagates unchanged.

        Args:
            key: Cache key
            chunks: Audio body, chunk by chunk

        Returns:
            The stored cache entry

        Raises:
            StorageException: When the local write fails
        """
        path = self.path_for(key)

        try:
            fd, temp_name = await asyncio.to_thread(
                tempfile.mkstemp,
                dir=self.cache_dir,
                prefix=TEMP_PREFIX,
                suffix=TEMP_SUFFIX,
            )
        except OSError as e:
            raise StorageException("write", str(path), e) from e

        committed = False
        size = 0
        try:
            with os.fdopen(fd, "wb") as fh:
                async for chunk in chunks:
                    if not chunk:
                        continue
                    await asyncio.to_thread(fh.write, chunk)
                    size += len(chunk)

            await asyncio.to_thread(os.chmod, temp_name, FILE_MODE)
            await asyncio.to_thread(os.replace, temp_name, path)
            committed = True
        except OSError as e:
            raise StorageException("write", str(path), e) from e
        finally:
            if not committed:
                self._discard(temp_name)

        logger.info("Cached audio stored", key=str(key), path=str(path), size_bytes=size)
        return CacheEntry(key=key, file_path=path, size_bytes=size)

    def schedule_evict(
        self, key: CacheKey, delay: Union[float, RetentionWindow]
    ) -> None:
        """Remove the file for ``key`` after ``delay`` if it is still present."""
        seconds = delay.seconds if isinstance(delay, RetentionWindow) else delay
        self.scheduler.schedule(key, seconds)

    def adopt(self, key: CacheKey, retention: RetentionWindow) -> Optional[CacheEntry]:
        """
        Put an on-disk file for ``key`` that has no timer under eviction.

        Such files are left behind by a process that stopped without cleaning
        up. Their lifetime counts from the file's modification time, and an
        already expired file is removed right away.

        Args:
            key: Cache key
            retention: Retention window of the entry

        Returns:
            The adopted entry, or None when no live file remains

        Raises:
            StorageException: The file cannot be inspected
        """
        path = self.path_for(key)
        try:
            st = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageException("stat", str(path), e) from e

        entry = CacheEntry(
            key=key,
            file_path=path,
            created_at=datetime.utcfromtimestamp(st.st_mtime),
            size_bytes=st.st_size,
        )
        if entry.is_expired(retention):
            logger.info("Untracked cached audio already expired", key=str(key))
            self.evict(key)
            return None

        remaining = (entry.expires_at(retention) - datetime.utcnow()).total_seconds()
        self.scheduler.schedule(key, remaining)
        logger.info("Adopted untracked cached audio", key=str(key), expires_in=remaining)
        return entry

    def sweep(self, retention: RetentionWindow) -> None:
        """
        Clean up after an earlier process. Must run inside the event loop.

        Partial downloads are removed; audio files are adopted so they expire
        like any other entry. Files that cannot be a cache entry are ignored.
        """
        try:
            paths = list(self.cache_dir.iterdir())
        except OSError as e:
            logger.warning("Failed to scan cache directory", path=str(self.cache_dir), error=str(e))
            return

        suffix = "." + self.extension
        discarded = adopted = 0
        for path in paths:
            name = path.name
            if name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX):
                self._discard(str(path))
                discarded += 1
                continue
            if path.suffix != suffix or not path.is_file():
                continue

            try:
                key = CacheKey(path.stem)
            except ValueError:
                continue
            if self.scheduler.is_scheduled(key):
                continue
            try:
                if self.adopt(key, retention) is not None:
                    adopted += 1
            except StorageException as e:
                logger.warning("Failed to adopt cached audio", path=str(path), error=e.message)

        logger.info(
            "Cache directory swept",
            partial_downloads_removed=discarded,
            entries_adopted=adopted,
        )

    def evict(self, key: CacheKey) -> EvictionOutcome:
        """
        Remove the file for ``key`` now, dropping any pending timer for it.

        Never raises: a missing file is expected when an eviction races with
        another cleanup, and other failures have no caller waiting on them.
        """
        self.scheduler.cancel(key)
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            outcome = EvictionOutcome.MISSING
            logger.warning("Failed to delete cached audio: file missing", path=str(path))
        except OSError as e:
            outcome = EvictionOutcome.FAILED
            logger.warning("Failed to delete cached audio", path=str(path), error=str(e))
        else:
            outcome = EvictionOutcome.REMOVED
            logger.info("Deleted cached audio", path=str(path))

        metrics.evictions_total.labels(outcome=outcome.value).inc()
        return outcome

    @property
    def pending_evictions(self) -> int:
        return self.scheduler.pending

    def close(self) -> int:
        """Stop all timers and remove the entries they were guarding."""
        return self.scheduler.shutdown(evict_pending=True)

    def _discard(self, temp_name: str) -> None:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove partial download", path=temp_name, error=str(e))
