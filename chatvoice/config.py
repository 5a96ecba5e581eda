"""Runtime settings model and loaders for chatvoice.

Responsibilities:
- Define runtime settings as a typed dataclass.
- Provide loader entry points for YAML- and environment-based settings.
- Resolve file > environment > default precedence deterministically.

Key types:
- `ChatvoiceConfig`: normalized runtime settings.
- `ConfigLoader`: static construction helpers for `ChatvoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string


_DEFAULT_FFMPEG_BINARY = "ffmpeg"
_DEFAULT_SAMPLE_RATE = 24000
_DEFAULT_LOG_LEVEL = "INFO"
_SUPPORTED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})


def default_data_dir() -> Path:
    """Return the default per-user data directory."""

    return Path.home() / ".chatvoice"


@dataclass(frozen=True, slots=True)
class ChatvoiceConfig:
    """Runtime settings for one CLI session.

    Attributes:
        data_dir: Root of stored options and `profiles/*.json`.
        audio_dir: Where raw and transcoded audio is written; `<data_dir>/audio` when unset.
        outbox_dir: Message transport outbox; `<data_dir>/outbox` when unset.
        timeout_seconds: HTTP timeout; `None` leaves requests unbounded.
        ffmpeg_binary: Command name or path of the ffmpeg executable.
        sample_rate: Output sample rate of transcoded voice payloads.
        log_level: Minimum phase log level.
    """

    data_dir: Path
    audio_dir: Path | None = None
    outbox_dir: Path | None = None
    timeout_seconds: float | None = None
    ffmpeg_binary: str = _DEFAULT_FFMPEG_BINARY
    sample_rate: int = _DEFAULT_SAMPLE_RATE
    log_level: str = _DEFAULT_LOG_LEVEL

    @property
    def resolved_audio_dir(self) -> Path:
        return self.audio_dir if self.audio_dir is not None else self.data_dir / "audio"

    @property
    def resolved_outbox_dir(self) -> Path:
        return self.outbox_dir if self.outbox_dir is not None else self.data_dir / "outbox"

    def validate(self) -> None:
        """Validate field values and raise `ValueError` on invalid settings."""

        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("`timeout_seconds` must be a positive number.")
        if self.sample_rate <= 0:
            raise ValueError("`sample_rate` must be a positive integer.")
        if not self.ffmpeg_binary.strip():
            raise ValueError("`ffmpeg_binary` must be a non-empty string.")
        if self.log_level not in _SUPPORTED_LOG_LEVELS:
            levels = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(f"`log_level` must be one of: {levels}.")


class ConfigLoader:
    """Factory helpers for loading `ChatvoiceConfig` from common sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "data_dir",
            "audio_dir",
            "outbox_dir",
            "timeout_seconds",
            "ffmpeg_binary",
            "sample_rate",
            "log_level",
        }
    )

    @staticmethod
    def from_yaml(path: Path, base: ChatvoiceConfig | None = None) -> ChatvoiceConfig:
        """Load settings from a YAML file, layered over `base` when provided."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping.")
        return ConfigLoader._build_config_from_mapping(
            payload,
            source_label=f"YAML config `{path}`",
            base=base or ChatvoiceConfig(data_dir=default_data_dir()),
        )

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: ChatvoiceConfig | None = None,
    ) -> ChatvoiceConfig:
        """Load settings from `CHATVOICE_*` environment variables."""

        source = env if env is not None else os.environ
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS:
            value = normalize_optional_string(source.get(f"CHATVOICE_{key.upper()}"))
            if value is not None:
                payload[key] = value
        return ConfigLoader._build_config_from_mapping(
            payload,
            source_label="Environment",
            base=base or ChatvoiceConfig(data_dir=default_data_dir()),
        )

    @staticmethod
    def resolve(
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
        data_dir: Path | None = None,
    ) -> ChatvoiceConfig:
        """Resolve settings with precedence: explicit `data_dir` > file > env > default."""

        config = ConfigLoader.from_env(env)
        if config_path is not None:
            config = ConfigLoader.from_yaml(config_path, base=config)
        if data_dir is not None:
            config = replace(config, data_dir=data_dir)
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any],
        source_label: str,
        base: ChatvoiceConfig,
    ) -> ChatvoiceConfig:
        """Validate payload keys and overlay typed values on `base`."""

        unknown = sorted(set(map(str, payload)).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        updates: dict[str, Any] = {}
        for key in ("data_dir", "audio_dir", "outbox_dir"):
            value = ConfigLoader._optional_non_empty_string(payload, key)
            if value is not None:
                updates[key] = Path(value).expanduser()
        timeout = ConfigLoader._optional_positive_number(payload, "timeout_seconds", source_label)
        if timeout is not None:
            updates["timeout_seconds"] = timeout
        ffmpeg_binary = ConfigLoader._optional_non_empty_string(payload, "ffmpeg_binary")
        if ffmpeg_binary is not None:
            updates["ffmpeg_binary"] = ffmpeg_binary
        sample_rate = ConfigLoader._optional_positive_number(payload, "sample_rate", source_label)
        if sample_rate is not None:
            if not float(sample_rate).is_integer():
                raise ValueError(f"{source_label} field `sample_rate` must be a positive integer.")
            updates["sample_rate"] = int(sample_rate)
        log_level = ConfigLoader._optional_non_empty_string(payload, "log_level")
        if log_level is not None:
            updates["log_level"] = log_level.upper()

        config = replace(base, **updates)
        config.validate()
        return config

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_positive_number(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> float | None:
        """Read and validate a positive numeric payload field."""

        if key not in payload:
            return None

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        if isinstance(raw_value, int | float):
            parsed = float(raw_value)
        else:
            normalized = normalize_optional_string(raw_value)
            if normalized is None:
                return None
            try:
                parsed = float(normalized)
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a positive number."
                ) from exc

        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        return parsed
