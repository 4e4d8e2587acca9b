"""
TTS Provider Client

Thin async client for the Google Translate speech endpoint.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import httpx
import structlog

from ...core.exceptions import UpstreamException, UpstreamTransportException

logger = structlog.get_logger(__name__)

DEFAULT_PROVIDER_URL = "https://translate.google.com/translate_tts"


class TTSProviderClient:
    """
    Streams synthesized speech from the provider.

    The underlying ``httpx.AsyncClient`` is owned by the caller (the
    application lifespan) and shared across requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        provider_url: str = DEFAULT_PROVIDER_URL,
        user_agent: str = "Mozilla/5.0",
        client_id: str = "tw-ob",
    ):
        self._http = http_client
        self.provider_url = provider_url
        self.user_agent = user_agent
        self.client_id = client_id

    def build_params(self, text: str, lang: str) -> Dict[str, str]:
        """Query parameters understood by the provider."""
        return {"ie": "UTF-8", "tl": lang, "q": text, "client": self.client_id}

    @asynccontextmanager
    async def stream_speech(self, text: str, lang: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Open a streaming request for ``text`` spoken in ``lang``.

        Yields:
            Async iterator over the audio body

        Raises:
            UpstreamException: Provider answered with a non-success status
            UpstreamTransportException: Connection or body read failed
        """
        params = self.build_params(text, lang)
        headers = {"User-Agent": self.user_agent}

        try:
            async with self._http.stream(
                "GET", self.provider_url, params=params, headers=headers
            ) as response:
                if not response.is_success:
                    logger.warning(
                        "TTS provider rejected request",
                        status=response.status_code,
                        lang=lang,
                    )
                    raise UpstreamException(response.status_code, url=self.provider_url)

                yield response.aiter_bytes()
        except httpx.HTTPError as e:
            logger.error("TTS provider unreachable", error=str(e), error_type=type(e).__name__)
            raise UpstreamTransportException(f"Failed to download TTS: {e}", e) from e
