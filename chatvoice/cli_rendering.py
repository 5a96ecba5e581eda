"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
profile listings, profile details, and synthesis summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import (
    CommandError,
    HttpError,
    InvalidProfileError,
    MalformedStructure,
    PersistenceError,
    ProfileNotFoundError,
    ProtectedKeyError,
    ProviderError,
    TranscodeError,
)
from .models.datatypes import DeliveryReceipt
from .models.profile import ProviderProfile
from .tts.dispatcher import is_sensitive_header


_ERROR_HINTS: tuple[tuple[type[Exception], str], ...] = (
    (ProtectedKeyError, "`source_key` and `format` can be edited but never removed."),
    (MalformedStructure, 'Structured values must be JSON objects or arrays, e.g. `{"key": "value"}`.'),
    (HttpError, "Check the profile host, method, and network connectivity."),
    (ProviderError, "Check provider credentials, quota, and voice parameters."),
    (TranscodeError, "Install ffmpeg or set `ffmpeg_binary` in the settings file."),
    (PersistenceError, "Check that the data directory is writable."),
    (ProfileNotFoundError, "Run `chatvoice profiles refresh` to rescan local profiles."),
    (InvalidProfileError, "Fix the profile JSON under `<data_dir>/profiles/` and retry."),
)


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        hint = next((text for kind, text in _ERROR_HINTS if isinstance(exc, kind)), None)
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def echo_profile_list(names: list[str], active_name: str) -> None:
    """Print profile names, marking the active one."""

    for name in names:
        marker = "*" if name == active_name else " "
        typer.echo(f"{marker} {name}")


def echo_profile(profile: ProviderProfile) -> None:
    """Print profile fields and typed parameter/header rows."""

    typer.echo(f"Profile: {profile.name}")
    typer.echo(f"Host: {profile.host}")
    typer.echo(f"Provider kind: {profile.provider_kind}")
    typer.echo(f"HTTP method: {profile.http_method.value}")
    typer.echo("Parameters:")
    for name, value in profile.parameters.items():
        marker = " (protected)" if name in profile.parameters.protected else ""
        typer.echo(f"  {name} [{value.kind.value}]{marker} = {value.as_text()}")
    typer.echo("Headers:")
    for name, value in profile.headers.items():
        shown = "[hidden]" if is_sensitive_header(name) else value.as_text()
        typer.echo(f"  {name} [{value.kind.value}] = {shown}")


def echo_delivery(receipt: DeliveryReceipt) -> None:
    """Print where a voice payload was delivered."""

    typer.echo(f"Sent to conversation: {receipt.conversation}")
    typer.echo(f"Voice payload: {receipt.payload_path}")
