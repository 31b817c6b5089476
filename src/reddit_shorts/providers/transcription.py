"""Word-level transcription with Deepgram's prerecorded API."""

import logging
from typing import Optional

import httpx

from ..constants import DEEPGRAM_BASE_URL, DEEPGRAM_MODEL, HTTP_TIMEOUT_SECONDS
from ..pipeline.base import ITranscriber, ProviderError, WordTiming
from .http import request_json

logger = logging.getLogger(__name__)


class DeepgramTranscriber(ITranscriber):
    """Transcribe audio hosted at a public URL into punctuated word timings."""

    def __init__(
        self,
        api_key: str,
        model: str = DEEPGRAM_MODEL,
        base_url: str = DEEPGRAM_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "DeepgramTranscriber":
        settings.require("deepgram_api_key")
        return cls(api_key=settings.deepgram_api_key, timeout=settings.http_timeout_seconds)

    @staticmethod
    def _parse_words(result: dict) -> list[WordTiming]:
        """Read the first alternative's words out of a listen response."""
        try:
            words = result["results"]["channels"][0]["alternatives"][0]["words"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                "Transcription response has no word list",
                provider="deepgram",
                operation="transcribe",
            ) from e

        try:
            return [
                WordTiming(
                    word=word.get("punctuated_word") or word["word"],
                    start=float(word["start"]),
                    end=float(word["end"]),
                )
                for word in words
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProviderError(
                f"Malformed word entry in transcription response: {e!r}",
                provider="deepgram",
                operation="transcribe",
            ) from e

    async def transcribe(self, audio_url: str) -> list[WordTiming]:
        """Transcribe audio at ``audio_url``.

        Returns:
            Word timings in spoken order. Empty when nothing was recognized.

        Raises:
            ProviderError: If the request fails or the response is malformed.
        """
        result = await request_json(
            "POST",
            f"{self.base_url}/listen",
            provider="deepgram",
            operation="transcribe",
            headers={"Authorization": f"Token {self.api_key}"},
            params={"model": self.model, "smart_format": "true"},
            json={"url": audio_url},
            timeout=self.timeout,
            transport=self._transport,
        )
        words = self._parse_words(result)
        logger.debug("Transcribed %d word(s) from %s", len(words), audio_url)
        return words
