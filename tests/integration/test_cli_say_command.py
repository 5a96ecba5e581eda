"""Integration tests for synthesis and voice message delivery CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from chatvoice.cli import app


def _run(data_dir: Path, *args: str, input: str | None = None):  # type: ignore[no-untyped-def]
    return CliRunner().invoke(app, ["--data-dir", str(data_dir), *args], input=input)


def _write_minimax_profile(write_profile) -> None:  # type: ignore[no-untyped-def]
    write_profile(
        "minimax",
        {
            "host": "https://api.example.com/v1/t2a_v2?GroupId=1",
            "host_type": "minimax",
            "http_type": "post",
            "params": {"source_key": "text", "format": "mp3", "model": "speech-01", "text": ""},
            "headers": {},
        },
    )


def test_say_with_vits_profile_writes_raw_audio(data_dir: Path, http_session, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    """GET synthesis binds the text into the query and saves the body verbatim."""

    http_session.queue(200, b"RIFF-audio")
    out = tmp_path / "out" / "hello.wav"

    result = _run(data_dir, "say", "Hello world", "--out", str(out))

    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b"RIFF-audio"
    assert "Audio: 10 bytes (wav)" in result.output
    url = http_session.sent[0].url
    assert url.startswith("https://artrajz-vits-simple-api.hf.space/voice/vits?")
    assert "text=Hello+world" in url
    assert url.index("format=wav") < url.index("text=Hello+world")


def test_say_with_minimax_profile_decodes_hex_and_sends(  # type: ignore[no-untyped-def]
    data_dir: Path,
    http_session,
    write_profile,
    credential_store,
) -> None:
    """POST synthesis decodes hex audio, attaches the stored token, and delivers."""

    _write_minimax_profile(write_profile)
    credential_store.tokens["minimax"] = "secret-token"
    http_session.queue(
        200,
        json.dumps({"base_resp": {"status_code": 0}, "data": {"audio": "48656c6c6f"}}).encode("utf-8"),
    )

    result = _run(data_dir, "say", "Hello", "--profile", "minimax", "--conversation", "friend")

    assert result.exit_code == 0, result.output
    request = http_session.sent[0]
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.body)["text"] == "Hello"
    payload = data_dir / "outbox" / "friend" / "tts.pcm"
    assert payload.read_bytes() == b"Hello"
    assert "Sent to conversation: friend" in result.output
    stored = json.loads((data_dir / "profiles" / "minimax.json").read_text(encoding="utf-8"))
    assert stored["headers"] == {}
    assert stored["params"]["text"] == ""


def test_say_reports_provider_error(data_dir: Path, http_session, write_profile) -> None:  # type: ignore[no-untyped-def]
    """Provider failures exit with the provider message and a hint."""

    _write_minimax_profile(write_profile)
    http_session.queue(
        200,
        json.dumps({"base_resp": {"status_code": 1002, "status_msg": "rate limit"}}).encode("utf-8"),
    )

    result = _run(data_dir, "say", "Hello", "--profile", "minimax")

    assert result.exit_code == 1
    assert "say failed: Minimax API error: rate limit" in result.output
    assert "Hint: Check provider credentials" in result.output


def test_say_reports_http_status_error(data_dir: Path, http_session) -> None:  # type: ignore[no-untyped-def]
    """Non-2xx statuses exit with the HTTP status."""

    http_session.queue(502, b"bad gateway")

    result = _run(data_dir, "say", "Hello")

    assert result.exit_code == 1
    assert "HTTP error, status = 502" in result.output


def test_say_preview_regenerates_then_sends(data_dir: Path, http_session) -> None:  # type: ignore[no-untyped-def]
    """With preview on, the user can regenerate before sending."""

    assert _run(data_dir, "options", "--preview").exit_code == 0
    http_session.queue(200, b"first")
    http_session.queue(200, b"second")

    result = _run(data_dir, "say", "Hi", "--conversation", "room", input="r\ns\n")

    assert result.exit_code == 0, result.output
    assert len(http_session.sent) == 2
    assert (data_dir / "outbox" / "room" / "tts.pcm").read_bytes() == b"second"
    assert "Preview audio:" in result.output


def test_say_preview_cancel_sends_nothing(data_dir: Path, http_session) -> None:  # type: ignore[no-untyped-def]
    """Cancelling a preview leaves the outbox untouched."""

    assert _run(data_dir, "options", "--preview").exit_code == 0
    http_session.queue(200, b"audio")

    result = _run(data_dir, "say", "Hi", "--conversation", "room", input="c\n")

    assert result.exit_code == 0, result.output
    assert "Voice message cancelled." in result.output
    assert not (data_dir / "outbox").exists()


def test_send_file_delivers_existing_audio(data_dir: Path, tmp_path: Path) -> None:
    """Existing audio files are transcoded and delivered."""

    clip = tmp_path / "clip.ogg"
    clip.write_bytes(b"OggS")

    result = _run(data_dir, "send-file", str(clip), "--conversation", "team")

    assert result.exit_code == 0, result.output
    assert (data_dir / "outbox" / "team" / "clip.pcm").read_bytes() == b"OggS"


def test_send_file_missing_source_fails(data_dir: Path, tmp_path: Path) -> None:
    """Missing files fail as transcode errors."""

    result = _run(data_dir, "send-file", str(tmp_path / "missing.ogg"), "--conversation", "team")

    assert result.exit_code == 1
    assert "does not exist" in result.output
    assert "Hint: Install ffmpeg" in result.output


def test_say_preview_without_format_uses_bin_extension(data_dir: Path, http_session) -> None:  # type: ignore[no-untyped-def]
    """An empty `format` parameter still yields a named preview file."""

    assert _run(data_dir, "options", "--preview").exit_code == 0
    assert _run(data_dir, "params", "set", "format", "").exit_code == 0
    http_session.queue(200, b"audio")

    result = _run(data_dir, "say", "Hi", "--conversation", "room", input="c\n")

    assert result.exit_code == 0, result.output
    assert (data_dir / "audio" / "preview.bin").read_bytes() == b"audio"
    assert not (data_dir / "audio" / "preview.").exists()
