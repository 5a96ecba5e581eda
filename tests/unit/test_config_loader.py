"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from chatvoice.config import ChatvoiceConfig, ConfigLoader


def test_config_loader_from_yaml_loads_and_normalizes_values(tmp_path: Path) -> None:
    """YAML loader should parse valid payloads and normalize typed/blank values."""

    config_path = tmp_path / "chatvoice.yml"
    config_path.write_text(
        """
data_dir: " data "
timeout_seconds: "12.5"
ffmpeg_binary: " /opt/ffmpeg "
sample_rate: 16000
log_level: " debug "
audio_dir: "  "
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.data_dir == Path("data")
    assert config.timeout_seconds == 12.5
    assert config.ffmpeg_binary == "/opt/ffmpeg"
    assert config.sample_rate == 16000
    assert config.log_level == "DEBUG"
    assert config.audio_dir is None
    assert config.resolved_audio_dir == Path("data") / "audio"
    assert config.resolved_outbox_dir == Path("data") / "outbox"


def test_config_loader_rejects_unknown_keys_and_bad_values(tmp_path: Path) -> None:
    """Unknown keys and invalid numbers fail with clear messages."""

    unknown_path = tmp_path / "unknown.yml"
    unknown_path.write_text("data_dir: d\nvoice: x\n", encoding="utf-8")
    with pytest.raises(ValueError, match=r"unsupported key\(s\): voice"):
        ConfigLoader.from_yaml(unknown_path)

    negative_path = tmp_path / "negative.yml"
    negative_path.write_text("timeout_seconds: -1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="timeout_seconds"):
        ConfigLoader.from_yaml(negative_path)

    fractional_path = tmp_path / "fractional.yml"
    fractional_path.write_text("sample_rate: 22050.5\n", encoding="utf-8")
    with pytest.raises(ValueError, match="sample_rate"):
        ConfigLoader.from_yaml(fractional_path)

    list_path = tmp_path / "list.yml"
    list_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(list_path)


def test_config_loader_from_env_reads_prefixed_variables(tmp_path: Path) -> None:
    """Environment settings use `CHATVOICE_*` names."""

    config = ConfigLoader.from_env(
        {
            "CHATVOICE_DATA_DIR": str(tmp_path),
            "CHATVOICE_SAMPLE_RATE": "48000",
            "CHATVOICE_LOG_LEVEL": "warning",
            "UNRELATED": "ignored",
        }
    )

    assert config.data_dir == tmp_path
    assert config.sample_rate == 48000
    assert config.log_level == "WARNING"


def test_config_loader_resolve_precedence(tmp_path: Path) -> None:
    """Explicit data dir beats the file, which beats the environment."""

    config_path = tmp_path / "chatvoice.yml"
    config_path.write_text("sample_rate: 8000\ndata_dir: from-file\n", encoding="utf-8")
    env = {"CHATVOICE_SAMPLE_RATE": "16000", "CHATVOICE_FFMPEG_BINARY": "avconv"}

    config = ConfigLoader.resolve(config_path=config_path, env=env, data_dir=tmp_path / "cli")

    assert config.sample_rate == 8000
    assert config.ffmpeg_binary == "avconv"
    assert config.data_dir == tmp_path / "cli"


def test_config_validate_rejects_unknown_log_level(tmp_path: Path) -> None:
    """Validation rejects unsupported log levels."""

    with pytest.raises(ValueError, match="log_level"):
        ChatvoiceConfig(data_dir=tmp_path, log_level="TRACE").validate()
