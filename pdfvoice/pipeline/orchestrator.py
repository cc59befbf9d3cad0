"""Pipeline orchestration for pdfvoice.

Responsibilities:
- Define the stage order for one document-to-speech conversion.
- Fan chunk synthesis out sequentially or over a bounded thread pool.
- Abort the whole conversion on the first chunk failure, before assembly.

Key types:
- `PdfVoicePipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
import wave

from ..audio.assembler import AudioAssembler
from ..config import PdfVoiceConfig
from ..errors import InputTooShortError, PipelineStageError, SynthesisError
from ..io.pdf_text_extractor import PdfTextExtractor, create_page_source
from ..models.datatypes import (
    AudioSegment,
    ConversionResult,
    DetectedLanguage,
    ExtractionReport,
    InspectionReport,
    SynthesisRequest,
    TextChunk,
)
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..text.chunking import Chunker
from ..text.cleaners import TextCleaner
from ..text.language import ScriptDetector, language_instruction
from ..text.speech import SpeechOptimizer
from ..tts.openai_client import OpenAIProviderError
from ..tts.rate_limiter import RateLimiter
from ..tts.synthesizer import SpeechSynthesizer
from ..tts.voices import VoiceProfile
from .telemetry import PipelineTelemetryMixin

INSPECTION_SAMPLE_CHARS = 600
PREVIEW_TEXT = "Hello! This is a short preview of how this voice sounds when reading your documents."


class PdfVoicePipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single pdfvoice conversion."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        extractor: PdfTextExtractor | None = None,
        assembler: AudioAssembler | None = None,
    ) -> None:
        """Initialize optional logging hooks and injectable collaborators.

        Collaborators left as `None` are built from the config of each call.
        """

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._synthesizer = synthesizer
        self._extractor = extractor
        self._assembler = assembler or AudioAssembler()
        self._cleaner = TextCleaner()
        self._optimizer = SpeechOptimizer()
        self._detector = ScriptDetector()
        self._chunker = Chunker()

    def convert_pdf(self, pdf_bytes: bytes, config: PdfVoiceConfig) -> ConversionResult:
        """Convert a text-based PDF into one audio buffer."""

        self._validate_config(config)
        report = self._run_stage(
            "extract",
            lambda: self._extract(pdf_bytes, config),
            lambda result: {"backend": result.backend, "pages": result.page_count},
        )
        return self._convert(report.text, config)

    def convert_text(self, text: str, config: PdfVoiceConfig) -> ConversionResult:
        """Convert direct text input into one audio buffer."""

        self._validate_config(config)
        return self._convert(text, config)

    def inspect_pdf(self, pdf_bytes: bytes, config: PdfVoiceConfig) -> InspectionReport:
        """Run every text stage of a PDF conversion without calling the speech engine."""

        self._validate_config(config)
        report = self._run_stage(
            "extract",
            lambda: self._extract(pdf_bytes, config),
            lambda result: {"backend": result.backend, "pages": result.page_count},
        )
        cleaned = self._run_stage("clean", lambda: self._clean(report.text), _length_context)
        optimized = self._run_stage("optimize", lambda: self._optimize(cleaned), _length_context)
        language = self._run_stage(
            "detect",
            lambda: self._detector.detect(optimized),
            lambda result: {"language": result.value},
        )
        chunks = self._run_stage(
            "chunk",
            lambda: self._chunk(optimized, config),
            lambda result: {"chunks": len(result)},
        )
        return InspectionReport(
            text_length=len(cleaned),
            detected_language=language,
            sample=cleaned[:INSPECTION_SAMPLE_CHARS],
            chunk_count=len(chunks),
            backend=report.backend,
        )

    def preview_voice(
        self,
        voice: str,
        config: PdfVoiceConfig,
        text: str | None = None,
    ) -> bytes:
        """Synthesize a short sample of one voice at normal speed."""

        config = config.with_overrides(tts_voice=voice)
        self._validate_config(config)
        sample = (text or PREVIEW_TEXT).strip()
        if len(sample) > config.engine_input_cap:
            raise PipelineStageError(
                stage="tts",
                detail=(
                    f"Preview text is {len(sample)} characters, above the engine cap "
                    f"of {config.engine_input_cap}."
                ),
                hint="Use a shorter preview text or `pdfvoice speak` for long input.",
            )
        synthesizer = self._synthesizer_for(config)
        try:
            return synthesizer.synthesize_preview(sample, VoiceProfile(voice))
        except OpenAIProviderError as exc:
            raise self._synthesis_error(exc, sequence_index=1) from exc

    def _convert(self, text: str, config: PdfVoiceConfig) -> ConversionResult:
        cleaned = self._run_stage("clean", lambda: self._clean(text), _length_context)
        self._run_stage("validate", lambda: self._validate_length(cleaned, config))
        optimized = self._run_stage("optimize", lambda: self._optimize(cleaned), _length_context)
        language = self._run_stage(
            "detect",
            lambda: self._detector.detect(optimized),
            lambda result: {"language": result.value},
        )
        chunks = self._run_stage(
            "chunk",
            lambda: self._chunk(optimized, config),
            lambda result: {"chunks": len(result)},
        )
        segments = self._run_stage(
            "tts",
            lambda: self._synthesize(chunks, language, config),
            lambda result: {"segments": len(result)},
        )
        audio = self._run_stage(
            "assemble",
            lambda: self._assemble(segments, config),
            lambda result: {"bytes": len(result)},
        )
        return ConversionResult(
            audio=audio,
            detected_language=language,
            text_length=len(optimized),
            chunk_count=len(chunks),
            response_format=config.response_format,
        )

    def _extract(self, pdf_bytes: bytes, config: PdfVoiceConfig) -> ExtractionReport:
        extractor = self._extractor or PdfTextExtractor(
            sources=[create_page_source(name) for name in config.pdf_backends],
            min_text_length=config.min_text_length,
        )
        return extractor.extract_with_report(pdf_bytes)

    def _clean(self, text: str) -> str:
        try:
            return self._cleaner.clean(text)
        except Exception as exc:
            raise PipelineStageError(
                stage="clean",
                detail=f"Failed to clean input text: {exc}",
                hint="Verify the input contains readable UTF-8 text.",
            ) from exc

    @staticmethod
    def _validate_length(text: str, config: PdfVoiceConfig) -> None:
        if len(text) < config.min_text_length:
            raise InputTooShortError(len(text), config.min_text_length)

    def _optimize(self, text: str) -> str:
        try:
            return self._optimizer.optimize(text)
        except Exception as exc:
            raise PipelineStageError(
                stage="optimize",
                detail=f"Failed to prepare text for speech: {exc}",
                hint="Verify the input contains readable UTF-8 text.",
            ) from exc

    def _chunk(self, text: str, config: PdfVoiceConfig) -> list[TextChunk]:
        chunks = self._chunker.segment(
            text, config.max_chunk_size, hard_limit=config.engine_input_cap
        )
        if not chunks:
            raise PipelineStageError(
                stage="chunk",
                detail="Text produced no chunks for synthesis.",
                hint="Provide a longer document or text passage.",
            )
        return chunks

    def _assemble(self, segments: Sequence[AudioSegment], config: PdfVoiceConfig) -> bytes:
        try:
            return self._assembler.assemble(segments, config.response_format)
        except (ValueError, EOFError, wave.Error) as exc:
            raise PipelineStageError(
                stage="assemble",
                detail=f"Failed to join chunk audio: {exc}",
                hint="Retry with `response_format: mp3` or a single chunk.",
            ) from exc

    def _synthesize(
        self,
        chunks: Sequence[TextChunk],
        language: DetectedLanguage,
        config: PdfVoiceConfig,
    ) -> list[AudioSegment]:
        """Synthesize every chunk and return segments sorted by sequence index."""

        synthesizer = self._synthesizer_for(config)
        instruction = language_instruction(language)
        requests = [
            SynthesisRequest(
                text=chunk.text,
                sequence_index=chunk.sequence_index,
                language_instruction=instruction,
                speed=config.tts_speed,
            )
            for chunk in chunks
        ]

        workers = min(config.synthesis_workers, len(requests))
        if workers <= 1:
            segments = [self._synthesize_chunk(synthesizer, request) for request in requests]
        else:
            segments = self._synthesize_parallel(synthesizer, requests, workers)
        return sorted(segments, key=lambda segment: segment.sequence_index)

    def _synthesize_parallel(
        self,
        synthesizer: SpeechSynthesizer,
        requests: Sequence[SynthesisRequest],
        workers: int,
    ) -> list[AudioSegment]:
        segments: list[AudioSegment] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pdfvoice-tts") as pool:
            futures = [
                pool.submit(self._synthesize_chunk, synthesizer, request) for request in requests
            ]
            try:
                for future in as_completed(futures):
                    segments.append(future.result())
            except BaseException:
                pool.shutdown(wait=True, cancel_futures=True)
                raise
        return segments

    def _synthesize_chunk(
        self, synthesizer: SpeechSynthesizer, request: SynthesisRequest
    ) -> AudioSegment:
        try:
            data = synthesizer.synthesize(request)
        except OpenAIProviderError as exc:
            raise self._synthesis_error(exc, sequence_index=request.sequence_index) from exc
        except SynthesisError:
            raise
        except Exception as exc:
            raise SynthesisError(
                f"Speech synthesis failed for chunk {request.sequence_index}: {exc}",
                sequence_index=request.sequence_index,
                hint="Verify TTS model/voice/provider configuration, then retry.",
            ) from exc
        if not data:
            raise SynthesisError(
                f"Speech engine returned no audio for chunk {request.sequence_index}.",
                sequence_index=request.sequence_index,
                failure_kind="empty_audio",
                hint="Retry the command. If it persists, try another voice or model.",
            )
        self._on_chunk_synthesized(request.sequence_index, len(request.text), len(data))
        return AudioSegment(sequence_index=request.sequence_index, data=data)

    def _synthesizer_for(self, config: PdfVoiceConfig) -> SpeechSynthesizer:
        if self._synthesizer is not None:
            return self._synthesizer
        return ProviderFactory.create_tts_synthesizer(
            config.provider_tts,
            model=config.tts_model,
            voice=VoiceProfile(config.tts_voice, speaking_rate=config.tts_speed),
            api_keys=config.api_keys,
            response_format=config.response_format,
            rate_limiter=RateLimiter(min_interval_seconds=config.request_interval_seconds),
        )

    @staticmethod
    def _synthesis_error(exc: OpenAIProviderError, *, sequence_index: int) -> SynthesisError:
        """Convert provider exception metadata into a chunk-scoped synthesis error."""

        details = {
            "invalid_api_key": "Provider authentication failed for OpenAI API credentials.",
            "insufficient_quota": "Provider quota is insufficient for this OpenAI request.",
            "rate_limited": "Provider rate limit was reached for every configured API key.",
            "invalid_model": "Provider rejected the configured TTS model.",
            "timeout": "Provider request timed out before completion.",
            "transport": "Provider request failed due to a transport/network error.",
        }
        hints = {
            "invalid_api_key": (
                "Set a valid API key via `pdfvoice credentials` or pass one-time `--api-key`."
            ),
            "insufficient_quota": (
                "Check OpenAI billing/quota, add a fallback key, then retry the command."
            ),
            "rate_limited": "Wait a moment, lower `--workers`, then retry the command.",
            "invalid_model": "Use `--model` with an available TTS model.",
            "timeout": "Retry the command. If timeouts persist, verify network stability.",
            "transport": "Check internet/proxy connectivity and retry the command.",
        }
        kind = exc.failure_kind
        return SynthesisError(
            f"Chunk {sequence_index}: {details.get(kind, str(exc))}",
            sequence_index=sequence_index,
            failure_kind=kind,
            hint=hints.get(
                kind, "Verify API key plus TTS model/voice/provider configuration, then retry."
            ),
        )

    @staticmethod
    def _validate_config(config: PdfVoiceConfig) -> None:
        """Validate configuration and map failures to a stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update the conversion options or config file and rerun the command.",
            ) from exc


def _length_context(text: str) -> dict[str, object]:
    return {"chars": len(text)}
