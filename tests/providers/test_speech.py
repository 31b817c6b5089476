"""Tests for OpenAI speech synthesis."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from reddit_shorts.pipeline import InvalidInput, ProviderError
from reddit_shorts.providers import OpenAISpeechSynthesizer, split_text

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/audio/speech")


def _client(content: bytes = b"mp3") -> MagicMock:
    client = MagicMock()
    client.audio.speech.create = AsyncMock(return_value=MagicMock(content=content))
    client.close = AsyncMock()
    return client


class TestSplitText:
    """Tests for split_text."""

    def test_short_text_is_one_piece(self):
        assert split_text("A short story.", limit=100) == ["A short story."]

    def test_pieces_respect_limit_and_keep_words(self):
        text = "The door creaked open. Nobody was there. " * 20
        pieces = split_text(text, limit=100)

        assert len(pieces) > 1
        assert all(len(p) <= 100 for p in pieces)
        assert " ".join(pieces).split() == text.split()

    def test_sentences_stay_whole(self):
        text = "First sentence here. Second sentence here. Third sentence here."
        pieces = split_text(text, limit=45)

        assert pieces == ["First sentence here. Second sentence here.", "Third sentence here."]

    def test_overlong_sentence_split_between_words(self):
        text = "word " * 60
        pieces = split_text(text.strip(), limit=50)

        assert all(len(p) <= 50 for p in pieces)
        assert " ".join(pieces).split() == text.split()

    def test_overlong_token_is_cut_not_truncated(self):
        text = "x" * 250 + " tail."

        pieces = split_text(text, limit=100)

        assert pieces == ["x" * 100, "x" * 100, "x" * 50 + " tail."]

    def test_pieces_rejoin_to_the_same_words(self):
        text = "alpha beta gamma delta epsilon zeta eta theta iota kappa. Short one. " * 3

        pieces = split_text(text, limit=30)

        assert all(len(p) <= 30 for p in pieces)
        assert " ".join(pieces).split() == text.split()


class TestOpenAISpeechSynthesizer:
    """Tests for OpenAISpeechSynthesizer."""

    @pytest.mark.asyncio
    async def test_single_request(self):
        client = _client(b"audio")
        synth = OpenAISpeechSynthesizer(client=client)

        audio = await synth.synthesize("tts-1", "onyx", "Once upon a time.")

        assert audio == b"audio"
        client.audio.speech.create.assert_awaited_once_with(
            model="tts-1",
            voice="onyx",
            input="Once upon a time.",
            response_format="mp3",
        )

    @pytest.mark.asyncio
    async def test_long_text_joined_in_order(self):
        client = _client()
        client.audio.speech.create.side_effect = [MagicMock(content=b"one"), MagicMock(content=b"two")]
        synth = OpenAISpeechSynthesizer(client=client, max_input_chars=100)

        audio = await synth.synthesize("tts-1", "onyx", "A" * 60 + ". " + "B" * 60 + ".")

        assert audio == b"onetwo"
        assert client.audio.speech.create.await_count == 2

    @pytest.mark.asyncio
    async def test_blank_text(self):
        synth = OpenAISpeechSynthesizer(client=_client())

        with pytest.raises(InvalidInput):
            await synth.synthesize("tts-1", "onyx", "   ")

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable(self):
        client = _client()
        client.audio.speech.create.side_effect = openai.APIConnectionError(request=OPENAI_REQUEST)
        synth = OpenAISpeechSynthesizer(client=client)

        with pytest.raises(ProviderError) as exc_info:
            await synth.synthesize("tts-1", "onyx", "Hello.")

        assert exc_info.value.is_retryable
        assert exc_info.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_status_error_carries_code(self):
        client = _client()
        client.audio.speech.create.side_effect = openai.APIStatusError(
            "Invalid voice",
            response=httpx.Response(400, request=OPENAI_REQUEST),
            body=None,
        )
        synth = OpenAISpeechSynthesizer(client=client)

        with pytest.raises(ProviderError) as exc_info:
            await synth.synthesize("tts-1", "nobody", "Hello.")

        assert exc_info.value.status_code == 400
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        client = _client()
        await OpenAISpeechSynthesizer(client=client).close()

        client.close.assert_awaited_once()
