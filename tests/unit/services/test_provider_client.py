"""
Unit tests for the TTS provider client.
"""

import httpx
import pytest

from tts_relay.core.exceptions import UpstreamException, UpstreamTransportException
from tts_relay.services.tts.provider_client import TTSProviderClient

from tests.fixtures.fake_provider import FAKE_AUDIO, BrokenBodyStream, FakeProvider


async def read_all(provider: FakeProvider, text: str = "Haus", lang: str = "de") -> bytes:
    client = TTSProviderClient(provider.client())
    body = b""
    async with client.stream_speech(text, lang) as chunks:
        async for chunk in chunks:
            body += chunk
    return body


class TestTTSProviderClient:
    """Test TTSProviderClient."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        provider = FakeProvider()

        body = await read_all(provider, "Haus", "de")

        assert body == FAKE_AUDIO
        assert provider.calls == 1
        request = provider.requests[0]
        assert request.method == "GET"
        assert request.url.host == "translate.google.com"
        assert request.url.path == "/translate_tts"
        assert dict(request.url.params) == {
            "ie": "UTF-8",
            "tl": "de",
            "q": "Haus",
            "client": "tw-ob",
        }
        assert request.headers["User-Agent"] == "Mozilla/5.0"

    @pytest.mark.asyncio
    async def test_raw_text_sent_upstream(self):
        """The provider gets the text as typed, spaces included."""
        provider = FakeProvider()

        await read_all(provider, "guten Tag")

        assert provider.requests[0].url.params["q"] == "guten Tag"

    def test_build_params_uses_configured_client_id(self):
        client = TTSProviderClient(httpx.AsyncClient(), client_id="custom")
        assert client.build_params("Haus", "en")["client"] == "custom"
        assert client.build_params("Haus", "en")["tl"] == "en"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 404, 429, 503])
    async def test_non_success_status(self, status):
        provider = FakeProvider(status_code=status)

        with pytest.raises(UpstreamException) as exc_info:
            await read_all(provider)

        assert exc_info.value.status == status
        assert exc_info.value.message == f"Failed to download TTS: {status}"
        assert exc_info.value.error_code == "UPSTREAM_ERROR"

    @pytest.mark.asyncio
    async def test_connect_error(self):
        provider = FakeProvider(error=httpx.ConnectError("name resolution failed"))

        with pytest.raises(UpstreamTransportException) as exc_info:
            await read_all(provider)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.details["original_error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_body_read_error(self):
        provider = FakeProvider(stream=BrokenBodyStream())

        with pytest.raises(UpstreamTransportException):
            await read_all(provider)
