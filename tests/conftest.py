"""
Main pytest configuration for the relay tests.

Provides settings pointed at a temporary cache directory and a fake TTS
provider built on ``httpx.MockTransport``.
"""

import os
from typing import Callable

import pytest

# Set test environment variables before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

from tts_relay.core.config import Settings
from tts_relay.domain.cache.value_objects import RetentionWindow
from tts_relay.infrastructure.storage.file_cache_store import FileCacheStore
from tts_relay.services.tts.orchestrator import TTSFetchOrchestrator
from tts_relay.services.tts.provider_client import TTSProviderClient

from tests.fixtures.fake_provider import FakeProvider


@pytest.fixture
def cache_dir(tmp_path):
    """Existing cache directory."""
    path = tmp_path / "tts_cache"
    path.mkdir()
    return path


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def store(cache_dir):
    store = FileCacheStore(cache_dir)
    yield store
    store.scheduler.shutdown(evict_pending=False)


@pytest.fixture
def make_orchestrator(store) -> Callable[..., TTSFetchOrchestrator]:
    """Factory for orchestrators wired to a fake provider."""

    def _make(provider: FakeProvider, retention_seconds: float = 20) -> TTSFetchOrchestrator:
        client = TTSProviderClient(provider.client())
        return TTSFetchOrchestrator(
            store,
            client,
            language="de",
            retention=RetentionWindow(retention_seconds),
        )

    return _make


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the host environment and .env files."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        CACHE_DIR=tmp_path / "www" / "tts_cache",
        CACHE_RETENTION_SECONDS=20,
        LOG_LEVEL="DEBUG",
    )
