"""Narration slicing with pydub."""

import asyncio
import io
import logging
import math
from typing import Optional

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from ..constants import AUDIO_FORMAT, AUDIO_TARGET_DBFS
from ..pipeline.base import AudioChunk, IAudioSlicer, InvalidInput, ProviderError

logger = logging.getLogger(__name__)


class PydubAudioSlicer(IAudioSlicer):
    """Split narration into fixed-length chunks, optionally loudness-normalized.

    Decoding and encoding MP3 requires ffmpeg on the PATH; WAV works without it.
    """

    def __init__(
        self,
        output_format: str = AUDIO_FORMAT,
        input_format: Optional[str] = None,
        target_dbfs: float = AUDIO_TARGET_DBFS,
    ):
        """Initialize the slicer.

        Args:
            output_format: Encoding of the produced chunks.
            input_format: Encoding of the input. Detected by ffmpeg when None.
            target_dbfs: Loudness target used when normalizing.
        """
        super().__init__()
        self.output_format = output_format
        self.input_format = input_format
        self.target_dbfs = target_dbfs

    @classmethod
    def from_settings(cls, settings) -> "PydubAudioSlicer":
        return cls(
            output_format=settings.audio.format,
            input_format="mp3",
            target_dbfs=settings.audio.target_dbfs,
        )

    def _normalize(self, segment: AudioSegment) -> AudioSegment:
        """Apply gain so the segment sits at the target loudness."""
        if math.isinf(segment.dBFS):
            return segment  # Silence
        return segment.apply_gain(self.target_dbfs - segment.dBFS)

    def _slice_sync(self, audio: bytes, max_seconds: float, normalize: bool) -> list[AudioChunk]:
        try:
            narration = AudioSegment.from_file(io.BytesIO(audio), format=self.input_format)
        except (CouldntDecodeError, OSError) as e:
            # OSError covers a missing ffmpeg binary
            raise ProviderError(
                f"Could not decode narration: {e}",
                provider="pydub",
                operation="slice",
            ) from e

        if len(narration) == 0:
            raise InvalidInput("Narration is empty")

        chunk_ms = int(max_seconds * 1000)
        chunks = []
        for index, start in enumerate(range(0, len(narration), chunk_ms)):
            piece = narration[start:start + chunk_ms]
            if normalize:
                piece = self._normalize(piece)

            buffer = io.BytesIO()
            try:
                piece.export(buffer, format=self.output_format)
            except OSError as e:
                raise ProviderError(
                    f"Could not encode chunk {index}: {e}",
                    provider="pydub",
                    operation="slice",
                ) from e
            chunks.append(AudioChunk(
                index=index,
                data=buffer.getvalue(),
                duration_seconds=len(piece) / 1000.0,
                format=self.output_format,
            ))

        logger.debug("Sliced %.1fs of narration into %d chunk(s)", len(narration) / 1000.0, len(chunks))
        return chunks

    async def slice(
        self,
        audio: bytes,
        max_seconds: float,
        normalize: bool = False,
    ) -> list[AudioChunk]:
        """Split narration into chunks of at most ``max_seconds``.

        Raises:
            InvalidInput: If ``max_seconds`` is not positive or the audio is empty.
            ProviderError: If the audio cannot be decoded or encoded, including
                when ffmpeg is not installed.
        """
        if max_seconds <= 0:
            raise InvalidInput(f"Chunk length must be positive, got {max_seconds}")

        loop = asyncio.get_event_loop()
        chunks = await loop.run_in_executor(
            None,
            lambda: self._slice_sync(audio, max_seconds, normalize),
        )
        self.log_detail(f"{len(chunks)} chunk(s) of at most {max_seconds:.0f}s")
        return chunks
