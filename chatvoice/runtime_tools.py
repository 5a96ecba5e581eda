"""External executable resolution for the audio transcoder.

Responsibilities:
- Find ffmpeg with bundled-first precedence, then `PATH`.
- Support frozen app layouts (for example PyInstaller) and local development runs.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import sys


def resolve_executable(command_name: str) -> str:
    """Resolve an executable name or path to the command to run.

    Resolution order:
    1. An explicit path that exists is used as-is.
    2. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    3. System `PATH`.
    4. Raw command name, so subprocess raises its native missing-binary error.
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name
    if Path(normalized).is_absolute() and Path(normalized).is_file():
        return normalized

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    found = shutil.which(normalized)
    return found if found is not None else normalized


def _bundled_candidates(command_name: str) -> list[Path]:
    app_root = _app_root()
    candidates: list[Path] = []
    for name in _candidate_names(command_name):
        candidates.extend((app_root / "bin" / name, app_root / name))
    return candidates


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including the Windows `.exe` suffix."""

    if command_name.lower().endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
