"""Secure provider token storage for chatvoice profiles.

Responsibilities:
- Persist one provider token per profile name in an OS-backed keyring.
- Attach a stored token as an `Authorization` header for a single call.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider token persistence.
- `KeyringCredentialStore`: keyring-backed secure token storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError

from .models.profile import ProviderProfile


_DEFAULT_SERVICE_NAME = "chatvoice"
_AUTHORIZATION_HEADER = "Authorization"


class CredentialStore:
    """Interface for secure provider token operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_token(self, profile_name: str) -> str | None:
        """Load the stored token for a profile, when available."""

        raise NotImplementedError

    def set_token(self, profile_name: str, token: str) -> None:
        """Persist a token for a profile."""

        raise NotImplementedError

    def clear_token(self, profile_name: str) -> bool:
        """Delete a stored token and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _load_keyring_module(self):  # type: ignore[no-untyped-def]
        """Return the keyring module; replaced by fakes in tests."""

        return keyring

    def is_available(self) -> bool:
        """Return `True` when a usable (non-fail) keyring backend is configured."""

        try:
            backend = self._load_keyring_module().get_keyring()
        except KeyringError:
            return False
        return getattr(backend, "priority", 1) > 0

    def get_token(self, profile_name: str) -> str | None:
        """Get a normalized token, returning `None` when missing."""

        value = self._load_keyring_module().get_password(self.service_name, profile_name)
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    def set_token(self, profile_name: str, token: str) -> None:
        """Persist a normalized token in the keyring."""

        normalized = token.strip()
        if not normalized:
            raise ValueError("Provider token must be a non-empty string.")
        self._load_keyring_module().set_password(self.service_name, profile_name, normalized)

    def clear_token(self, profile_name: str) -> bool:
        """Remove the stored token and report if one was present."""

        if self.get_token(profile_name) is None:
            return False
        self._load_keyring_module().delete_password(self.service_name, profile_name)
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()


def apply_stored_token(profile: ProviderProfile, store: CredentialStore) -> ProviderProfile:
    """Return a profile copy carrying `Authorization: Bearer <token>` for one call.

    Profiles that already define an `Authorization` header (any casing) are
    returned unchanged. The copy is never meant to be saved.
    """

    if any(name.lower() == _AUTHORIZATION_HEADER.lower() for name in profile.headers):
        return profile
    token = store.get_token(profile.name)
    if token is None:
        return profile
    authorized = profile.copy()
    authorized.headers.set(_AUTHORIZATION_HEADER, f"Bearer {token}")
    return authorized
