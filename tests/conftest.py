"""Shared pytest fixtures for the full chatvoice test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
import requests


def _build_response(
    status_code: int = 200,
    content: bytes | str | dict[str, Any] = b"",
) -> requests.Response:
    """Build a real `requests.Response` carrying the given status and body."""

    if isinstance(content, dict):
        content = json.dumps(content)
    if isinstance(content, str):
        content = content.encode("utf-8")
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.encoding = "utf-8"
    return response


class FakeHttpSession:
    """Record prepared requests and replay queued responses or errors."""

    def __init__(self, *replies: requests.Response | Exception) -> None:
        """Initialize the session with replies returned in order."""

        self._replies = list(replies)
        self.sent: list[requests.PreparedRequest] = []
        self.timeouts: list[float | None] = []

    def send(
        self,
        prepared: requests.PreparedRequest,
        timeout: float | None = None,
    ) -> requests.Response:
        """Record the request and return (or raise) the next queued reply."""

        self.sent.append(prepared)
        self.timeouts.append(timeout)
        reply = self._replies.pop(0) if self._replies else _build_response(200, b"")
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Provide a factory for canned HTTP responses."""

    return _build_response


@pytest.fixture
def fake_http_session() -> type[FakeHttpSession]:
    """Provide the recording HTTP session class."""

    return FakeHttpSession


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Provide an empty chatvoice data directory."""

    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def write_profile(data_dir: Path) -> Callable[[str, dict[str, Any]], Path]:
    """Provide a helper writing profile JSON files the way the store lays them out."""

    def _write(name: str, payload: dict[str, Any]) -> Path:
        path = data_dir / "profiles" / f"{name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
