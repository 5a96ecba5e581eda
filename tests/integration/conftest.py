"""Integration-test fixtures for deterministic provider and converter behavior."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest
import requests

from chatvoice import cli as cli_module
from chatvoice.audio import transcoder as transcoder_module
from chatvoice.credentials import CredentialStore
from chatvoice.provider_factory import ProviderFactory


class InMemoryCredentialStore(CredentialStore):
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self) -> None:
        """Initialize empty token storage."""

        self.tokens: dict[str, str] = {}

    def is_available(self) -> bool:
        """Return availability flag expected by the CLI status command."""

        return True

    def get_token(self, profile_name: str) -> str | None:
        """Return the stored token for a profile."""

        return self.tokens.get(profile_name)

    def set_token(self, profile_name: str, token: str) -> None:
        """Persist a normalized token."""

        self.tokens[profile_name] = token.strip()

    def clear_token(self, profile_name: str) -> bool:
        """Clear a token and return whether one existed."""

        return self.tokens.pop(profile_name, None) is not None


class ScriptedHttpSession:
    """HTTP session double replaying queued responses and recording requests."""

    def __init__(self) -> None:
        """Initialize empty reply queue."""

        self.replies: list[requests.Response] = []
        self.sent: list[requests.PreparedRequest] = []

    def queue(self, status_code: int, content: bytes) -> None:
        """Append a canned response."""

        response = requests.Response()
        response.status_code = status_code
        response._content = content
        response.encoding = "utf-8"
        self.replies.append(response)

    def send(self, prepared: requests.PreparedRequest, timeout: float | None = None) -> requests.Response:
        """Record the request and return the next canned response."""

        _ = timeout
        self.sent.append(prepared)
        return self.replies.pop(0)


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace the OS keyring with in-memory storage for every CLI test."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr(cli_module, "create_credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def http_session(monkeypatch: pytest.MonkeyPatch) -> ScriptedHttpSession:
    """Route orchestrator HTTP traffic through a scripted session."""

    scripted = ScriptedHttpSession()
    original = ProviderFactory.create_orchestrator

    def _create_orchestrator(session, http_session=None):  # type: ignore[no-untyped-def]
        _ = http_session
        return original(session, http_session=scripted)

    monkeypatch.setattr(ProviderFactory, "create_orchestrator", staticmethod(_create_orchestrator))
    return scripted


@pytest.fixture(autouse=True)
def _mock_ffmpeg(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock ffmpeg by copying input bytes into the requested output file."""

    def _fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        _ = kwargs
        source = Path(command[command.index("-i") + 1])
        Path(command[-1]).write_bytes(source.read_bytes())
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(transcoder_module.subprocess, "run", _fake_run)
