"""Configuration storage and profile listing collaborators.

Responsibilities:
- Provide JSON key/value storage for the main option blob and profile blobs.
- Enumerate profile definitions available on local storage.
- Make writes atomic and surface failures as `PersistenceError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Protocol

from ..errors import PersistenceError


MAIN_OPTION_KEY = "text_to_speech"
PROFILE_KEY_PREFIX = "profiles/"


def profile_key(name: str) -> str:
    """Return the storage key for a named profile blob."""

    return f"{PROFILE_KEY_PREFIX}{name}"


class ConfigStore(Protocol):
    """Key/value storage for JSON configuration blobs."""

    def get(self, key: str) -> Any:
        """Return the stored JSON value for `key`, or `None` when absent."""

    def set(self, key: str, value: Any) -> None:
        """Persist `value` under `key` or raise `PersistenceError`."""


class ProfileListing(Protocol):
    """Enumerates locally available profile definitions."""

    def list_local_profile_names(self) -> list[str]:
        """Return available profile names in deterministic order."""


class JsonFileConfigStore:
    """Filesystem-backed configuration store.

    Key `text_to_speech` maps to `<root>/text_to_speech.json`; key
    `profiles/<name>` maps to `<root>/profiles/<name>.json`.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root data directory."""

        self.root = root

    @property
    def profiles_dir(self) -> Path:
        return self.root / "profiles"

    def path_for(self, key: str) -> Path:
        """Return the JSON file path backing `key`.

        Raises:
            PersistenceError: If the key would resolve outside `root`.
        """

        relative = Path(*key.split("/"))
        path = self.root / relative.with_name(f"{relative.name}.json")
        if not path.resolve().is_relative_to(self.root.resolve()):
            raise PersistenceError(f"Config key `{key}` resolves outside `{self.root}`.")
        return path

    def get(self, key: str) -> Any:
        """Load a JSON value; missing files read as `None`."""

        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Stored config `{path}` is not valid JSON: {exc.msg}.") from exc
        except OSError as exc:
            raise PersistenceError(f"Failed to read stored config `{path}`: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        """Write a JSON value atomically via a sibling temp file."""

        path = self.path_for(key)
        temp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(value, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(temp_path, path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write config `{path}`: {exc}") from exc
        finally:
            if temp_path.exists():
                temp_path.unlink()

    def list_local_profile_names(self) -> list[str]:
        """Return sorted stems of `<root>/profiles/*.json`."""

        if not self.profiles_dir.is_dir():
            return []
        return sorted(
            path.stem for path in self.profiles_dir.glob("*.json") if path.is_file()
        )

    def exists(self, key: str) -> bool:
        """Return whether a value is stored under `key`."""

        return self.path_for(key).exists()
