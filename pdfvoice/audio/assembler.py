"""Audio assembly stage.

Responsibilities:
- Concatenate per-chunk audio buffers into one output buffer.
- Preserve chunk order by sequence index regardless of completion order.

Raw frame concatenation assumes the engine codec (MP3 by default) tolerates
independently encoded segments played back to back. Players may seek slightly
inaccurately near segment boundaries; no re-muxing is attempted. WAV segments
each carry their own RIFF header, so they are re-written under a single header.
"""

from __future__ import annotations

import io
import wave
from typing import Sequence

from ..models.datatypes import AudioSegment

CONCATENABLE_FORMATS = frozenset({"mp3", "aac", "pcm"})
ASSEMBLED_FORMATS = CONCATENABLE_FORMATS | {"wav"}


class AudioAssembler:
    """Join synthesized chunk audio into one deterministic buffer."""

    def assemble(self, segments: Sequence[AudioSegment], response_format: str = "mp3") -> bytes:
        """Join segment audio in ascending `sequence_index` order.

        Raises:
            ValueError: For formats that cannot be joined, or WAV segments with
                mismatched channel, sample width or frame rate parameters.
        """

        if response_format not in ASSEMBLED_FORMATS:
            raise ValueError(f"Audio format `{response_format}` cannot be assembled from chunks.")
        if len(segments) == 1:
            return segments[0].data

        ordered = sorted(segments, key=lambda item: item.sequence_index)
        if response_format == "wav":
            return self._join_wav(ordered)

        output = bytearray(sum(len(item.data) for item in ordered))
        offset = 0
        for segment in ordered:
            end = offset + len(segment.data)
            output[offset:end] = segment.data
            offset = end
        return bytes(output)

    @staticmethod
    def _join_wav(ordered: Sequence[AudioSegment]) -> bytes:
        buffer = io.BytesIO()
        with wave.open(io.BytesIO(ordered[0].data), "rb") as first:
            channels = first.getnchannels()
            sample_width = first.getsampwidth()
            framerate = first.getframerate()

        with wave.open(buffer, "wb") as merged:
            merged.setnchannels(channels)
            merged.setsampwidth(sample_width)
            merged.setframerate(framerate)
            for segment in ordered:
                with wave.open(io.BytesIO(segment.data), "rb") as chunk:
                    if (
                        chunk.getnchannels() != channels
                        or chunk.getsampwidth() != sample_width
                        or chunk.getframerate() != framerate
                    ):
                        raise ValueError(
                            f"Incompatible WAV parameters for chunk {segment.sequence_index}."
                        )
                    merged.writeframes(chunk.readframes(chunk.getnframes()))
        return buffer.getvalue()
