"""Configuration model and loaders for pdfvoice.

Responsibilities:
- Define runtime configuration as a typed dataclass with validation.
- Load configuration from YAML files and `PDFVOICE_*` environment variables.
- Collect ordered speech-engine credentials for rotation.

Key types:
- `PdfVoiceConfig`: normalized runtime settings for one conversion.
- `ConfigLoader`: static construction helpers for `PdfVoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from .audio.assembler import ASSEMBLED_FORMATS
from .io.pdf_text_extractor import MIN_TEXT_LENGTH, create_page_source
from .tts.voices import MAX_SPEED, MIN_SPEED, is_supported_voice

DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
DEFAULT_TTS_VOICE = "fable"
DEFAULT_TTS_SPEED = 0.85
DEFAULT_MAX_CHUNK_SIZE = 3800
ENGINE_INPUT_CAP = 4096
ENV_API_KEY_NAMES = ("OPENAI_API_KEY", "OPENAI_API_KEY_2", "OPENAI_API_KEY_3")

_SUPPORTED_PROVIDER_IDS = frozenset({"openai"})
_SUPPORTED_RESPONSE_FORMATS = ASSEMBLED_FORMATS


def _clean_string(value: object) -> str | None:
    """Return a stripped string, or `None` for missing/blank values."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def collect_api_keys(*sources: Iterable[str | None]) -> tuple[str, ...]:
    """Merge credential sources in order, dropping blanks and duplicates."""

    ordered: list[str] = []
    for source in sources:
        for candidate in source:
            key = _clean_string(candidate)
            if key is not None and key not in ordered:
                ordered.append(key)
    return tuple(ordered)


@dataclass(slots=True)
class PdfVoiceConfig:
    """Runtime configuration for one conversion.

    Attributes:
        output_dir: Directory for CLI audio output when no explicit path is given.
        provider_tts: TTS provider identifier.
        tts_model: Speech model identifier.
        tts_voice: Speech voice identifier.
        tts_speed: Speaking rate multiplier sent with every chunk.
        response_format: Audio format requested from the engine.
        max_chunk_size: Preferred maximum characters per synthesized chunk.
        engine_input_cap: Hard per-request character cap of the engine.
        min_text_length: Minimum characters required before synthesis.
        max_input_chars: Cap applied by the CLI to direct text input.
        synthesis_workers: Concurrent chunk synthesis calls (1 = sequential).
        request_interval_seconds: Minimum spacing between engine requests.
        pdf_backends: Ordered PDF page-text backend names.
        api_keys: Ordered engine credentials tried on quota failures.
    """

    output_dir: Path = Path("out")
    provider_tts: str = "openai"
    tts_model: str = DEFAULT_TTS_MODEL
    tts_voice: str = DEFAULT_TTS_VOICE
    tts_speed: float = DEFAULT_TTS_SPEED
    response_format: str = "mp3"
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    engine_input_cap: int = ENGINE_INPUT_CAP
    min_text_length: int = MIN_TEXT_LENGTH
    max_input_chars: int = 100_000
    synthesis_workers: int = 1
    request_interval_seconds: float = 0.05
    pdf_backends: tuple[str, ...] = ("pypdf",)
    api_keys: tuple[str, ...] = ()

    def validate(self) -> None:
        """Validate configuration values before pipeline execution."""

        if self.provider_tts not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported provider `{self.provider_tts}` for `provider_tts`. "
                f"Supported providers: {supported}."
            )
        if not self.tts_model.strip():
            raise ValueError("`tts_model` must be a non-empty string.")
        if not is_supported_voice(self.tts_voice):
            raise ValueError(f"Unsupported voice `{self.tts_voice}` for `tts_voice`.")
        if not MIN_SPEED <= self.tts_speed <= MAX_SPEED:
            raise ValueError(f"`tts_speed` must be between {MIN_SPEED} and {MAX_SPEED}.")
        if self.response_format not in _SUPPORTED_RESPONSE_FORMATS:
            supported = ", ".join(sorted(_SUPPORTED_RESPONSE_FORMATS))
            raise ValueError(
                f"Unsupported `response_format` `{self.response_format}`. "
                f"Supported formats: {supported}."
            )
        if self.engine_input_cap <= 0:
            raise ValueError("`engine_input_cap` must be a positive integer.")
        if not 0 < self.max_chunk_size < self.engine_input_cap:
            raise ValueError(
                "`max_chunk_size` must be a positive integer below "
                f"`engine_input_cap` ({self.engine_input_cap})."
            )
        if self.min_text_length <= 0:
            raise ValueError("`min_text_length` must be a positive integer.")
        if self.max_input_chars < self.min_text_length:
            raise ValueError("`max_input_chars` must not be below `min_text_length`.")
        if self.synthesis_workers <= 0:
            raise ValueError("`synthesis_workers` must be a positive integer.")
        if self.request_interval_seconds < 0:
            raise ValueError("`request_interval_seconds` must not be negative.")
        if not self.pdf_backends:
            raise ValueError("`pdf_backends` must list at least one backend.")
        for backend in self.pdf_backends:
            create_page_source(backend)

    def with_overrides(self, **overrides: Any) -> PdfVoiceConfig:
        """Return a copy with non-`None` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied)


class ConfigLoader:
    """Factory methods for creating `PdfVoiceConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        item.name for item in fields(PdfVoiceConfig)
    )
    _INT_KEYS = frozenset(
        {
            "max_chunk_size",
            "engine_input_cap",
            "min_text_length",
            "max_input_chars",
            "synthesis_workers",
        }
    )
    _FLOAT_KEYS = frozenset({"tts_speed", "request_interval_seconds"})
    _ENV_KEYS = {
        "output_dir": "PDFVOICE_OUTPUT_DIR",
        "provider_tts": "PDFVOICE_PROVIDER_TTS",
        "tts_model": "PDFVOICE_TTS_MODEL",
        "tts_voice": "PDFVOICE_TTS_VOICE",
        "tts_speed": "PDFVOICE_TTS_SPEED",
        "response_format": "PDFVOICE_RESPONSE_FORMAT",
        "max_chunk_size": "PDFVOICE_MAX_CHUNK_SIZE",
        "engine_input_cap": "PDFVOICE_ENGINE_INPUT_CAP",
        "min_text_length": "PDFVOICE_MIN_TEXT_LENGTH",
        "max_input_chars": "PDFVOICE_MAX_INPUT_CHARS",
        "synthesis_workers": "PDFVOICE_SYNTHESIS_WORKERS",
        "request_interval_seconds": "PDFVOICE_REQUEST_INTERVAL_SECONDS",
        "pdf_backends": "PDFVOICE_PDF_BACKENDS",
    }

    @staticmethod
    def from_yaml(path: Path, env: Mapping[str, str] | None = None) -> PdfVoiceConfig:
        """Create a validated config from a YAML file.

        Environment credentials are appended after any `api_keys` listed in the file.
        """

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(
                f"YAML `{path}` includes unsupported key(s): {', '.join(unknown)}."
            )

        values = ConfigLoader._coerce_mapping(payload, source_label=f"YAML `{path}`")
        env_map: Mapping[str, str] = os.environ if env is None else env
        values["api_keys"] = collect_api_keys(
            values.get("api_keys", ()),
            (env_map.get(name) for name in ENV_API_KEY_NAMES),
        )
        config = PdfVoiceConfig(**values)
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> PdfVoiceConfig:
        """Create a validated config from `PDFVOICE_*` and `OPENAI_API_KEY*` variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        raw = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if _clean_string(env_map.get(env_key)) is not None
        }
        values = ConfigLoader._coerce_mapping(raw, source_label="Environment")
        values["api_keys"] = collect_api_keys(env_map.get(name) for name in ENV_API_KEY_NAMES)
        config = PdfVoiceConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _coerce_mapping(payload: Mapping[str, Any], source_label: str) -> dict[str, Any]:
        """Convert raw payload values into typed config field values."""

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if raw_value is None:
                continue
            if key in ConfigLoader._INT_KEYS:
                values[key] = ConfigLoader._positive_int(raw_value, key, source_label)
            elif key in ConfigLoader._FLOAT_KEYS:
                values[key] = ConfigLoader._float(raw_value, key, source_label)
            elif key == "output_dir":
                path_text = _clean_string(raw_value)
                if path_text is not None:
                    values[key] = Path(path_text)
            elif key in {"pdf_backends", "api_keys"}:
                values[key] = ConfigLoader._string_tuple(raw_value)
            else:
                text = _clean_string(raw_value)
                if text is not None:
                    values[key] = text
        return values

    @staticmethod
    def _positive_int(value: object, key: str, source_label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        try:
            parsed = int(str(value).strip())
        except ValueError as exc:
            raise ValueError(
                f"{source_label} field `{key}` must be a positive integer."
            ) from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _float(value: object, key: str, source_label: str) -> float:
        if isinstance(value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        try:
            return float(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc

    @staticmethod
    def _string_tuple(value: object) -> tuple[str, ...]:
        """Accept a YAML list or a comma-separated string."""

        items = value.split(",") if isinstance(value, str) else list(value)  # type: ignore[arg-type]
        return tuple(text for text in (_clean_string(item) for item in items) if text)

