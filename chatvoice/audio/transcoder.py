"""Audio transcoding collaborator backed by ffmpeg.

Responsibilities:
- Store raw provider audio under a stable or timestamped file name.
- Convert stored audio to 16-bit mono PCM voice payloads with ffmpeg.
- Report conversion results as `TranscodeOutcome` values instead of raising.
"""

from __future__ import annotations

from pathlib import Path
import subprocess
import time
from typing import Callable, Protocol

from ..models.datatypes import TranscodeOutcome
from ..parsing import normalize_optional_string
from ..runtime_tools import resolve_executable


class Transcoder(Protocol):
    """Converts raw audio into a voice payload file."""

    def convert(self, raw_audio: bytes, declared_format: str) -> TranscodeOutcome:
        """Convert in-memory audio declared as `declared_format`."""

    def convert_file(self, source_path: Path) -> TranscodeOutcome:
        """Convert an existing audio file."""


class FfmpegTranscoder:
    """Write raw audio to disk and transcode it to PCM with ffmpeg."""

    def __init__(
        self,
        audio_dir: Path,
        ffmpeg_binary: str = "ffmpeg",
        sample_rate: int = 24000,
        keep_history: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize output location and ffmpeg settings.

        Args:
            audio_dir: Directory for raw and converted audio files.
            ffmpeg_binary: ffmpeg command name or path.
            sample_rate: Output sample rate in Hz.
            keep_history: Name raw files `tts@<epoch-ms>.<format>` instead of
                overwriting `tts.<format>`.
            clock: Time source used for history file names.
        """

        self.audio_dir = audio_dir
        self.ffmpeg_binary = ffmpeg_binary
        self.sample_rate = sample_rate
        self.keep_history = keep_history
        self._clock = clock

    def raw_audio_path(self, declared_format: str) -> Path:
        """Return the file path raw audio of `declared_format` is stored at."""

        extension = (normalize_optional_string(declared_format) or "bin").lstrip(".")
        if self.keep_history:
            return self.audio_dir / f"tts@{int(self._clock() * 1000)}.{extension}"
        return self.audio_dir / f"tts.{extension}"

    def save_raw(self, raw_audio: bytes, declared_format: str) -> Path:
        """Write raw provider audio and return its path."""

        path = self.raw_audio_path(declared_format)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(raw_audio)
        return path

    def convert(self, raw_audio: bytes, declared_format: str) -> TranscodeOutcome:
        """Store raw audio and convert it to a PCM voice payload."""

        try:
            source_path = self.save_raw(raw_audio, declared_format)
        except OSError as exc:
            return TranscodeOutcome(status="failure", message=f"Failed to store audio: {exc}")
        return self.convert_file(source_path)

    def convert_file(self, source_path: Path) -> TranscodeOutcome:
        """Convert an existing audio file to `<audio_dir>/<stem>.pcm`."""

        if not source_path.is_file():
            return TranscodeOutcome(
                status="failure",
                message=f"Audio file `{source_path}` does not exist.",
            )
        output_path = self.audio_dir / f"{source_path.stem}.pcm"
        command = [
            resolve_executable(self.ffmpeg_binary),
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(source_path),
            "-f",
            "s16le",
            "-ac",
            "1",
            "-ar",
            str(self.sample_rate),
            str(output_path),
        ]

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            subprocess.run(command, check=True, capture_output=True, text=True)
        except FileNotFoundError:
            return TranscodeOutcome(
                status="failure",
                message=f"Transcoding tool `{self.ffmpeg_binary}` is not available on PATH.",
            )
        except subprocess.CalledProcessError as exc:
            stderr = normalize_optional_string(exc.stderr) or "no stderr output"
            return TranscodeOutcome(
                status="failure",
                message=f"ffmpeg failed for `{source_path.name}`: {stderr}",
            )
        except OSError as exc:
            return TranscodeOutcome(status="failure", message=f"ffmpeg could not run: {exc}")

        return TranscodeOutcome(status="success", file_path=output_path)
