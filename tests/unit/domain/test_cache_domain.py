"""
Unit tests for Cache Domain Models.

Tests value objects and the cache entry entity.
"""

import pytest
from datetime import datetime, timedelta
from pathlib import Path

from tts_relay.domain.cache.entities import CacheEntry
from tts_relay.domain.cache.value_objects import (
    CacheKey,
    ResourceRef,
    RetentionWindow,
)


class TestCacheKey:
    """Test CacheKey value object."""

    def test_plain_word(self):
        key = CacheKey.from_text("Haus")
        assert key.value == "Haus"
        assert str(key) == "Haus"

    def test_all_whitespace_removed(self):
        """Whitespace is removed everywhere, not only at the ends."""
        key = CacheKey.from_text("  guten\tTag \n")
        assert key.value == "gutenTag"

    def test_whitespace_variants_collide(self):
        """Inputs differing only in whitespace share one cache entry (accepted)."""
        assert CacheKey.from_text("guten Tag") == CacheKey.from_text("gutenTag")
        assert CacheKey.from_text(" Haus") == CacheKey.from_text("Haus ")

    def test_file_name(self):
        assert CacheKey("Haus").file_name("mp3") == "Haus.mp3"

    def test_quoted_matches_uri_component_encoding(self):
        assert CacheKey("Straße").quoted == "Stra%C3%9Fe"
        assert CacheKey("a?b&c").quoted == "a%3Fb%26c"
        assert CacheKey("hallo!").quoted == "hallo!"

    def test_invalid_key_empty(self):
        with pytest.raises(ValueError, match="Cache key cannot be empty"):
            CacheKey("")

    def test_whitespace_only_text_is_empty(self):
        with pytest.raises(ValueError, match="Cache key cannot be empty"):
            CacheKey.from_text(" \t ")

    def test_invalid_key_whitespace(self):
        with pytest.raises(ValueError, match="Cache key cannot contain whitespace"):
            CacheKey("invalid key")

    @pytest.mark.parametrize("value", ["../etc", "a/b", "a\\b", "nul\x00"])
    def test_invalid_key_path_separator(self, value):
        with pytest.raises(ValueError, match="path separators"):
            CacheKey(value)

    @pytest.mark.parametrize("value", [".", ".."])
    def test_invalid_key_relative_marker(self, value):
        with pytest.raises(ValueError, match="relative path marker"):
            CacheKey(value)

    def test_invalid_key_too_long(self):
        with pytest.raises(ValueError, match="Cache key too long"):
            CacheKey("a" * 251)

    def test_length_counts_utf8_bytes(self):
        # 126 two-byte characters exceed the byte limit
        with pytest.raises(ValueError, match="Cache key too long"):
            CacheKey("ä" * 126)
        assert CacheKey("ä" * 125).value


class TestRetentionWindow:
    """Test RetentionWindow value object."""

    def test_default_is_twenty_seconds(self):
        assert RetentionWindow.default().seconds == 20
        assert str(RetentionWindow.default()) == "20s"

    def test_fractional_seconds(self):
        assert str(RetentionWindow(0.5)) == "0.5s"

    @pytest.mark.parametrize("seconds", [0, -1])
    def test_non_positive_rejected(self, seconds):
        with pytest.raises(ValueError, match="must be positive"):
            RetentionWindow(seconds)

    def test_too_large_rejected(self):
        with pytest.raises(ValueError, match="too large"):
            RetentionWindow(86401)


class TestResourceRef:
    """Test ResourceRef value object."""

    def test_reference_for_plain_word(self):
        ref = ResourceRef.for_key(CacheKey("Haus"), "/tts_cache", "mp3")
        assert ref.path == "/tts_cache/Haus.mp3"

    def test_reference_uses_canonical_key(self):
        """The reference names the same file the store writes."""
        key = CacheKey.from_text("guten Tag")
        ref = ResourceRef.for_key(key, "/tts_cache/", "mp3")
        assert ref.path == "/tts_cache/gutenTag.mp3"

    def test_reference_percent_encodes(self):
        ref = ResourceRef.for_key(CacheKey("Bär"), "/tts_cache", "mp3")
        assert str(ref) == "/tts_cache/B%C3%A4r.mp3"


class TestCacheEntry:
    """Test CacheEntry entity."""

    def test_expiry(self):
        created = datetime.utcnow() - timedelta(seconds=30)
        entry = CacheEntry(
            key=CacheKey("Haus"),
            file_path=Path("/tmp/tts_cache/Haus.mp3"),
            created_at=created,
        )
        retention = RetentionWindow.default()

        assert entry.expires_at(retention) == created + timedelta(seconds=20)
        assert entry.is_expired(retention)

    def test_fresh_entry_not_expired(self):
        entry = CacheEntry(key=CacheKey("Haus"), file_path=Path("/tmp/Haus.mp3"))
        assert not entry.is_expired(RetentionWindow.default())

    def test_entry_is_immutable(self):
        entry = CacheEntry(key=CacheKey("Haus"), file_path=Path("/tmp/Haus.mp3"))
        with pytest.raises(AttributeError):
            entry.size_bytes = 10

    def test_relative_path_rejected(self):
        with pytest.raises(ValueError, match="must be absolute"):
            CacheEntry(key=CacheKey("Haus"), file_path=Path("Haus.mp3"))
