"""Text-to-speech using the OpenAI audio API."""

import logging
import re
from typing import Optional

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
    RateLimitError,
)

from ..constants import HTTP_RETRYABLE_STATUS_CODES, TTS_MAX_INPUT_CHARS
from ..pipeline.base import InvalidInput, ISpeechSynthesizer, ProviderError

logger = logging.getLogger(__name__)


def split_text(text: str, limit: int = TTS_MAX_INPUT_CHARS) -> list[str]:
    """Split text into pieces of at most ``limit`` characters.

    Sentences are kept whole where possible; a sentence longer than the
    limit is split between words, and a word longer than the limit is cut
    into limit-sized parts. No text is dropped.
    """
    if len(text) <= limit:
        return [text]

    sentences = re.findall(r".*?[.!?]+(?:\s+|$)|.+", text, flags=re.DOTALL)

    # Further split long sentences by spaces
    pieces = []
    for sentence in sentences:
        sentence = sentence.strip()
        if not sentence:
            continue
        if len(sentence) <= limit:
            pieces.append(sentence)
            continue
        current = ""
        for word in sentence.split():
            # A token longer than the limit is cut into limit-sized parts
            for part in (word[i:i + limit] for i in range(0, len(word), limit)):
                if not current:
                    current = part
                elif len(current) + len(part) + 1 <= limit:
                    current = f"{current} {part}"
                else:
                    pieces.append(current)
                    current = part
        if current:
            pieces.append(current)

    # Merge small pieces
    merged = []
    current = ""
    for piece in pieces:
        if not current:
            current = piece
        elif len(current) + len(piece) + 1 <= limit:
            current = f"{current} {piece}"
        else:
            merged.append(current)
            current = piece
    if current:
        merged.append(current)

    return merged


class OpenAISpeechSynthesizer(ISpeechSynthesizer):
    """Narrate text with OpenAI speech models (``tts-1``, ``tts-1-hd``)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_input_chars: int = TTS_MAX_INPUT_CHARS,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize the synthesizer.

        Args:
            api_key: OpenAI API key.
            max_input_chars: Longest text sent in one request.
            client: Preconfigured client, replaces the one built from the key.
        """
        super().__init__()
        self.max_input_chars = max_input_chars
        self._client = client or AsyncOpenAI(api_key=api_key)

    @classmethod
    def from_settings(cls, settings) -> "OpenAISpeechSynthesizer":
        settings.require("openai_api_key")
        return cls(
            api_key=settings.openai_api_key,
            max_input_chars=settings.tts.max_input_chars,
        )

    async def close(self) -> None:
        await self._client.close()

    async def synthesize(self, model: str, voice: str, text: str) -> bytes:
        """Narrate text as MP3.

        Text over the request limit is narrated piece by piece and the MP3
        streams are joined in order.

        Raises:
            InvalidInput: If the text is blank.
            ProviderError: If the OpenAI request fails.
        """
        if not text.strip():
            raise InvalidInput("Cannot synthesize blank text")

        pieces = split_text(text, self.max_input_chars)
        self.log_detail(f"{model}/{voice}: {len(text)} chars in {len(pieces)} request(s)")

        audio = bytearray()
        for i, piece in enumerate(pieces, start=1):
            try:
                response = await self._client.audio.speech.create(
                    model=model,
                    voice=voice,
                    input=piece,
                    response_format="mp3",
                )
            except (RateLimitError, APIConnectionError, APITimeoutError) as e:
                raise ProviderError(
                    str(e), provider="openai", operation="synthesize", is_retryable=True
                ) from e
            except APIStatusError as e:
                raise ProviderError(
                    e.message,
                    provider="openai",
                    operation="synthesize",
                    status_code=e.status_code,
                    is_retryable=e.status_code in HTTP_RETRYABLE_STATUS_CODES,
                ) from e
            except OpenAIError as e:
                raise ProviderError(str(e), provider="openai", operation="synthesize") from e

            audio.extend(response.content)
            logger.debug("Synthesized piece %d/%d (%d chars)", i, len(pieces), len(piece))

        return bytes(audio)
