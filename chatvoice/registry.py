"""Profile registry and explicit session state.

Responsibilities:
- Lazily load the main option blob and the active profile from storage.
- Switch, list, create, save, and refresh named provider profiles.
- Persist every mutation before updating in-memory state.

Lifecycle:
- The main option blob is read on first use. When none is stored yet, it is
  initialized from the locally listed profiles (creating a `default` profile
  when none exist) and written back.
- The active profile is cached after loading and replaced whenever a write
  touches it; `active_profile()` hands out copies so unsaved edits never leak
  into the cache.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .config import ChatvoiceConfig
from .errors import DuplicateKeyError, InvalidKeyError, PersistenceError, ProfileNotFoundError
from .io.storage import (
    MAIN_OPTION_KEY,
    ConfigStore,
    JsonFileConfigStore,
    ProfileListing,
    profile_key,
)
from .models.profile import ProviderProfile
from .parsing import normalize_optional_string, parse_permissive_boolean
from .telemetry.logger import RunLogger


DEFAULT_PROFILE_NAME = "default"
_PATH_SEPARATORS = ("/", "\\")


@dataclass(frozen=True, slots=True)
class MainOption:
    """Persisted registry state.

    Attributes:
        current_profile: Active profile name.
        available_profiles: Known profile names in display order.
        enable_preview: Whether the host previews audio before sending.
        enable_cache: Whether raw audio files are kept under unique names.
    """

    current_profile: str
    available_profiles: tuple[str, ...]
    enable_preview: bool = False
    enable_cache: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "current_profile": self.current_profile,
            "available_profiles": list(self.available_profiles),
            "enable_preview": self.enable_preview,
            "enable_cache": self.enable_cache,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> MainOption:
        """Parse a stored blob, keeping the current name among the available ones."""

        raw_available = payload.get("available_profiles") or []
        if not isinstance(raw_available, list):
            raise PersistenceError("Stored `available_profiles` must be a list.")
        available: list[str] = []
        for raw_name in raw_available:
            name = normalize_optional_string(raw_name)
            if name is not None and name not in available:
                available.append(name)

        current = normalize_optional_string(payload.get("current_profile"))
        if current is None:
            if not available:
                raise PersistenceError("Stored options name no current or available profile.")
            current = available[0]
        if current not in available:
            available.append(current)

        return cls(
            current_profile=current,
            available_profiles=tuple(available),
            enable_preview=parse_permissive_boolean(payload.get("enable_preview")) or False,
            enable_cache=parse_permissive_boolean(payload.get("enable_cache")) or False,
        )


class ProfileRegistry:
    """Named provider profiles plus the active selection."""

    def __init__(
        self,
        store: ConfigStore,
        listing: ProfileListing,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._store = store
        self._listing = listing
        self._run_logger = run_logger
        self._main: MainOption | None = None
        self._active: ProviderProfile | None = None

    @property
    def main_option(self) -> MainOption:
        return self._ensure_loaded()

    @property
    def active_profile_name(self) -> str:
        return self._ensure_loaded().current_profile

    @property
    def preview_enabled(self) -> bool:
        return self._ensure_loaded().enable_preview

    @property
    def cache_enabled(self) -> bool:
        return self._ensure_loaded().enable_cache

    def active_profile(self) -> ProviderProfile:
        """Return a copy of the active profile, loading it on first use."""

        main = self._ensure_loaded()
        if self._active is None or self._active.name != main.current_profile:
            self._active = self._load_profile(main.current_profile)
        return self._active.copy()

    def get_profile(self, name: str) -> ProviderProfile:
        """Return a copy of a stored profile without changing the selection."""

        if name == self.active_profile_name:
            return self.active_profile()
        return self._load_profile(name)

    def select_profile(self, name: str) -> ProviderProfile:
        """Make `name` the active profile and persist the selection.

        Raises:
            ProfileNotFoundError: If no profile named `name` is stored.
            PersistenceError: If the selection cannot be written.
        """

        main = self._ensure_loaded()
        profile = self._load_profile(name)
        available = main.available_profiles
        if name not in available:
            available = (*available, name)
        self._persist_main(replace(main, current_profile=name, available_profiles=available))
        self._active = profile
        return profile.copy()

    def list_profile_names(self) -> list[str]:
        """Return known profile names in display order."""

        return list(self._ensure_loaded().available_profiles)

    def refresh_from_external_source(self) -> list[str]:
        """Replace known names with the locally listed ones.

        The active name stays selectable even when it vanished from storage.
        """

        main = self._ensure_loaded()
        names = list(dict.fromkeys(self._listing.list_local_profile_names()))
        if main.current_profile not in names:
            self._diagnostic(
                "active profile missing from listing, kept selectable",
                profile=main.current_profile,
            )
            names.append(main.current_profile)
        self._persist_main(replace(main, available_profiles=tuple(names)))
        return names

    def save_profile(self, profile: ProviderProfile) -> None:
        """Persist a profile and register its name when new.

        The name is registered before the profile blob is written, so a failed
        blob write leaves a registered name without a stored profile, which a
        later `create_profile` can fill in.
        """

        main = self._ensure_loaded()
        if profile.name not in main.available_profiles:
            self._persist_main(
                replace(main, available_profiles=(*main.available_profiles, profile.name))
            )
        self._store.set(profile_key(profile.name), profile.to_payload())
        if profile.name == self._ensure_loaded().current_profile:
            self._active = replace(profile.copy(), diagnostics=())

    def create_profile(self, name: str) -> ProviderProfile:
        """Create and persist a blank profile named `name`.

        Raises:
            InvalidKeyError: If `name` is blank, contains a path separator, or
                starts with a dot (which also rules out `..`).
            DuplicateKeyError: If a profile named `name` already exists.
        """

        normalized = normalize_optional_string(name)
        if normalized is None:
            raise InvalidKeyError(str(name), detail="Profile name must be a non-empty string.")
        if any(separator in normalized for separator in _PATH_SEPARATORS) or normalized.startswith("."):
            raise InvalidKeyError(
                normalized,
                detail=f"Profile name `{normalized}` must not contain path separators or start with a dot.",
            )
        self._ensure_loaded()
        if self._store.get(profile_key(normalized)) is not None:
            raise DuplicateKeyError(normalized, detail=f"Profile `{normalized}` already exists.")
        profile = ProviderProfile.blank(normalized)
        self.save_profile(profile)
        return profile.copy()

    def set_preview_enabled(self, enabled: bool) -> None:
        self._persist_main(replace(self._ensure_loaded(), enable_preview=enabled))

    def set_cache_enabled(self, enabled: bool) -> None:
        self._persist_main(replace(self._ensure_loaded(), enable_cache=enabled))

    def _ensure_loaded(self) -> MainOption:
        if self._main is not None:
            return self._main

        payload = self._store.get(MAIN_OPTION_KEY)
        if payload is not None:
            if not isinstance(payload, Mapping):
                raise PersistenceError("Stored options must be a JSON object.")
            self._main = MainOption.from_payload(payload)
            return self._main

        names = list(dict.fromkeys(self._listing.list_local_profile_names()))
        if not names:
            self._diagnostic("no local profiles, created default", profile=DEFAULT_PROFILE_NAME)
            blank = ProviderProfile.blank(DEFAULT_PROFILE_NAME)
            self._store.set(profile_key(blank.name), blank.to_payload())
            names = [blank.name]
        self._persist_main(MainOption(current_profile=names[0], available_profiles=tuple(names)))
        return self._main  # type: ignore[return-value]

    def _persist_main(self, main: MainOption) -> None:
        self._store.set(MAIN_OPTION_KEY, main.to_payload())
        self._main = main

    def _load_profile(self, name: str) -> ProviderProfile:
        payload = self._store.get(profile_key(name))
        if payload is None:
            raise ProfileNotFoundError(name)
        profile = ProviderProfile.from_payload(name, payload)
        for detail in profile.diagnostics:
            self._diagnostic(detail, profile=name)
        return profile

    def _diagnostic(self, detail: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_diagnostic("registry", detail, **context)


@dataclass(slots=True)
class SessionState:
    """Explicit per-session state: runtime settings and the profile registry."""

    config: ChatvoiceConfig
    registry: ProfileRegistry
    run_logger: RunLogger | None = field(default=None)

    @classmethod
    def open(cls, config: ChatvoiceConfig, run_logger: RunLogger | None = None) -> SessionState:
        """Build a session backed by JSON files under `config.data_dir`."""

        store = JsonFileConfigStore(config.data_dir)
        return cls(
            config=config,
            registry=ProfileRegistry(store, store, run_logger=run_logger),
            run_logger=run_logger,
        )
