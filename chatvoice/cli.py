"""Command-line interface for chatvoice.

Responsibilities:
- Expose synthesis, delivery, and profile editing commands.
- Resolve runtime settings and open an explicit session per invocation.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Annotated, Callable

import typer
import yaml

from .cli_rendering import (
    echo_delivery,
    echo_profile,
    echo_profile_list,
    exit_with_command_error,
)
from .config import ChatvoiceConfig, ConfigLoader
from .credentials import apply_stored_token, create_credential_store
from .errors import CommandError
from .models.datatypes import AudioPayload, SynthesisResult
from .models.profile import DEFAULT_HOST, DEFAULT_PROVIDER_KIND, HttpMethod, ProviderProfile
from .models.typed_value import ParsePolicy, TypedValue, ValueKind, parse_edit
from .models.value_set import NamedValueSet
from .parsing import normalize_optional_string
from .provider_factory import ProviderFactory
from .registry import SessionState
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="chatvoice",
    no_args_is_help=True,
    help="chatvoice CLI: synthesize chat text with configurable TTS providers.",
)
profiles_app = typer.Typer(no_args_is_help=True, help="List, select, create, and refresh profiles.")
profile_app = typer.Typer(no_args_is_help=True, help="Edit host, provider kind, and HTTP method.")
params_app = typer.Typer(no_args_is_help=True, help="Edit typed request parameters.")
headers_app = typer.Typer(no_args_is_help=True, help="Edit typed request headers.")
app.add_typer(profiles_app, name="profiles")
app.add_typer(profile_app, name="profile")
app.add_typer(params_app, name="params")
app.add_typer(headers_app, name="headers")

ProfileOption = Annotated[
    str | None,
    typer.Option("--profile", help="Profile to use (defaults to the active profile)."),
]
TypeOption = Annotated[
    ValueKind | None,
    typer.Option("--type", help="Value kind: string, number, boolean, or structured."),
]
PermissiveOption = Annotated[
    bool,
    typer.Option(
        "--permissive",
        help="Map unparseable numbers to 0 and non-`true` booleans to false instead of failing.",
    ),
]


@dataclass(slots=True)
class CliState:
    """Global options shared by all commands of one invocation."""

    config_file: Path | None = None
    data_dir: Path | None = None
    verbose: bool = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML settings file."),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Directory holding options and `profiles/*.json`."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit debug phase logs, including redacted requests."),
    ] = False,
) -> None:
    """Store global options for subcommands."""

    ctx.obj = CliState(config_file=config_file, data_dir=data_dir, verbose=verbose)


def _load_config(state: CliState) -> ChatvoiceConfig:
    """Resolve settings and map loader failures to command errors."""

    try:
        return ConfigLoader.resolve(
            config_path=state.config_file,
            env=os.environ,
            data_dir=state.data_dir,
        )
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{state.config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except yaml.YAMLError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file `{state.config_file}` is not valid YAML: {exc}",
            hint="Verify YAML syntax and rerun.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid settings: {exc}",
            hint="Fix settings values in the YAML file or `CHATVOICE_*` variables.",
        ) from exc


def _open_session(ctx: typer.Context) -> SessionState:
    state = ctx.obj if isinstance(ctx.obj, CliState) else CliState()
    config = _load_config(state)
    level = "DEBUG" if state.verbose else config.log_level
    return SessionState.open(config, run_logger=RunLogger(level=level))


def _with_stored_token(profile: ProviderProfile) -> ProviderProfile:
    store = create_credential_store()
    if not store.is_available():
        return profile
    return apply_stored_token(profile, store)


def _require_audio(result: SynthesisResult) -> AudioPayload:
    if result.failure is not None:
        raise result.failure
    if result.audio is None:
        raise CommandError(stage="synthesize", detail="Provider returned no audio.")
    return result.audio


def _prompt_preview_decision() -> str:
    """Ask whether to send, regenerate, or cancel a previewed message."""

    while True:
        answer = typer.prompt("Send, regenerate, or cancel? [s/r/c]", default="s")
        token = answer.strip().lower()[:1]
        if token in {"s", "r", "c"}:
            return token
        typer.echo("Please answer `s`, `r`, or `c`.")


@app.command("say")
def say_command(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Chat text to synthesize.")],
    profile_name: ProfileOption = None,
    language: Annotated[
        str,
        typer.Option("--language", help="Target language tag (informational)."),
    ] = "",
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Write the raw provider audio to this file."),
    ] = None,
    conversation: Annotated[
        str | None,
        typer.Option("--conversation", help="Transcode and send the audio to this conversation."),
    ] = None,
) -> None:
    """Synthesize text and optionally send it as a voice message."""

    receipt = None
    decision = "s"
    try:
        session = _open_session(ctx)
        registry = session.registry
        profile = (
            registry.get_profile(profile_name) if profile_name else registry.active_profile()
        )
        request_profile = _with_stored_token(profile)
        orchestrator = ProviderFactory.create_orchestrator(session)
        result = orchestrator.synthesize(text, request_profile, language)
        audio = _require_audio(result)

        if conversation is not None and registry.preview_enabled:
            while True:
                extension = normalize_optional_string(audio.audio_format) or "bin"
                preview_path = session.config.resolved_audio_dir / f"preview.{extension}"
                preview_path.parent.mkdir(parents=True, exist_ok=True)
                preview_path.write_bytes(audio.data)
                typer.echo(f"Preview audio: {preview_path}")
                decision = _prompt_preview_decision()
                if decision != "r":
                    break
                result = orchestrator.synthesize(text, request_profile, language)
                audio = _require_audio(result)

        if out is not None:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(audio.data)
        if conversation is not None and decision == "s":
            receipt = orchestrator.deliver(result, conversation)
    except Exception as exc:
        exit_with_command_error("say", exc)

    typer.echo(f"Profile: {profile.name}")
    typer.echo(f"Audio: {len(audio.data)} bytes ({audio.audio_format or 'unknown format'})")
    if out is not None:
        typer.echo(f"Saved audio: {out}")
    if receipt is not None:
        echo_delivery(receipt)
    elif conversation is not None:
        typer.echo("Voice message cancelled.")


@app.command("send-file")
def send_file_command(
    ctx: typer.Context,
    audio_file: Annotated[Path, typer.Argument(help="Existing audio file to send.")],
    conversation: Annotated[
        str,
        typer.Option("--conversation", help="Conversation to send the voice message to."),
    ],
) -> None:
    """Transcode an existing audio file and send it as a voice message."""

    try:
        session = _open_session(ctx)
        orchestrator = ProviderFactory.create_orchestrator(session)
        receipt = orchestrator.deliver_file(audio_file, conversation)
    except Exception as exc:
        exit_with_command_error("send-file", exc)

    echo_delivery(receipt)


@profiles_app.command("list")
def profiles_list_command(ctx: typer.Context) -> None:
    """List known profiles, marking the active one."""

    try:
        registry = _open_session(ctx).registry
        names = registry.list_profile_names()
        active_name = registry.active_profile_name
    except Exception as exc:
        exit_with_command_error("profiles list", exc)

    echo_profile_list(names, active_name)


@profiles_app.command("select")
def profiles_select_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Profile to activate.")],
) -> None:
    """Make a profile the active one."""

    try:
        profile = _open_session(ctx).registry.select_profile(name)
    except Exception as exc:
        exit_with_command_error("profiles select", exc)

    typer.echo(f"Active profile: {profile.name}")


@profiles_app.command("refresh")
def profiles_refresh_command(ctx: typer.Context) -> None:
    """Rescan `<data_dir>/profiles/` for available profiles."""

    try:
        registry = _open_session(ctx).registry
        names = registry.refresh_from_external_source()
        active_name = registry.active_profile_name
    except Exception as exc:
        exit_with_command_error("profiles refresh", exc)

    echo_profile_list(names, active_name)


@profiles_app.command("create")
def profiles_create_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the new profile.")],
) -> None:
    """Create a blank profile pointing at the default VITS endpoint."""

    try:
        profile = _open_session(ctx).registry.create_profile(name)
    except Exception as exc:
        exit_with_command_error("profiles create", exc)

    typer.echo(f"Created profile: {profile.name}")
    echo_profile(profile)


@profiles_app.command("show")
def profiles_show_command(
    ctx: typer.Context,
    name: Annotated[str | None, typer.Argument(help="Profile to show.")] = None,
) -> None:
    """Show a profile's host, kind, method, parameters, and headers."""

    try:
        registry = _open_session(ctx).registry
        profile = registry.get_profile(name) if name else registry.active_profile()
    except Exception as exc:
        exit_with_command_error("profiles show", exc)

    echo_profile(profile)


def _edit_profile(
    ctx: typer.Context,
    command_name: str,
    profile_name: str | None,
    mutate: Callable[[ProviderProfile], None],
) -> ProviderProfile:
    """Load a profile, apply `mutate`, and persist it; exit on any failure."""

    try:
        registry = _open_session(ctx).registry
        profile = registry.get_profile(profile_name or registry.active_profile_name)
        mutate(profile)
        registry.save_profile(profile)
    except Exception as exc:
        exit_with_command_error(command_name, exc)
    return profile


@profile_app.command("set-host")
def profile_set_host_command(
    ctx: typer.Context,
    host: Annotated[str, typer.Argument(help="Provider URL, optionally with a query string.")],
    profile_name: ProfileOption = None,
) -> None:
    """Set the provider URL."""

    def mutate(profile: ProviderProfile) -> None:
        normalized = normalize_optional_string(host)
        if normalized is None:
            raise CommandError(stage="profile", detail="Host must be a non-empty URL.")
        profile.host = normalized

    profile = _edit_profile(ctx, "profile set-host", profile_name, mutate)
    typer.echo(f"Host of `{profile.name}`: {profile.host}")


@profile_app.command("reset-host")
def profile_reset_host_command(ctx: typer.Context, profile_name: ProfileOption = None) -> None:
    """Restore the default VITS endpoint."""

    def mutate(profile: ProviderProfile) -> None:
        profile.host = DEFAULT_HOST

    profile = _edit_profile(ctx, "profile reset-host", profile_name, mutate)
    typer.echo(f"Host of `{profile.name}`: {profile.host}")


@profile_app.command("set-kind")
def profile_set_kind_command(
    ctx: typer.Context,
    kind: Annotated[str, typer.Argument(help="Provider kind, e.g. `vits` or `minimax`.")],
    profile_name: ProfileOption = None,
) -> None:
    """Set the provider kind that selects response decoding."""

    def mutate(profile: ProviderProfile) -> None:
        normalized = normalize_optional_string(kind)
        if normalized is None:
            raise CommandError(stage="profile", detail="Provider kind must be non-empty.")
        profile.provider_kind = normalized

    profile = _edit_profile(ctx, "profile set-kind", profile_name, mutate)
    typer.echo(f"Provider kind of `{profile.name}`: {profile.provider_kind}")


@profile_app.command("reset-kind")
def profile_reset_kind_command(ctx: typer.Context, profile_name: ProfileOption = None) -> None:
    """Restore the default `vits` provider kind."""

    def mutate(profile: ProviderProfile) -> None:
        profile.provider_kind = DEFAULT_PROVIDER_KIND

    profile = _edit_profile(ctx, "profile reset-kind", profile_name, mutate)
    typer.echo(f"Provider kind of `{profile.name}`: {profile.provider_kind}")


@profile_app.command("set-method")
def profile_set_method_command(
    ctx: typer.Context,
    method: Annotated[HttpMethod, typer.Argument(help="HTTP method: get or post.")],
    profile_name: ProfileOption = None,
) -> None:
    """Set the HTTP method used to call the provider."""

    def mutate(profile: ProviderProfile) -> None:
        profile.http_method = method

    profile = _edit_profile(ctx, "profile set-method", profile_name, mutate)
    typer.echo(f"HTTP method of `{profile.name}`: {profile.http_method.value}")


@profile_app.command("reset-method")
def profile_reset_method_command(ctx: typer.Context, profile_name: ProfileOption = None) -> None:
    """Restore the default GET method."""

    def mutate(profile: ProviderProfile) -> None:
        profile.http_method = HttpMethod.GET

    profile = _edit_profile(ctx, "profile reset-method", profile_name, mutate)
    typer.echo(f"HTTP method of `{profile.name}`: {profile.http_method.value}")


def _target_set(profile: ProviderProfile, target: str) -> NamedValueSet:
    return profile.parameters if target == "params" else profile.headers


def _parse_or_raise(raw_value: str, kind: ValueKind, permissive: bool) -> TypedValue:
    policy = ParsePolicy.PERMISSIVE if permissive else ParsePolicy.STRICT
    result = parse_edit(raw_value, kind, policy)
    if result.error is not None:
        raise result.error
    return result.value


def _add_entry(
    ctx: typer.Context,
    target: str,
    name: str,
    raw_value: str,
    value_type: ValueKind | None,
    permissive: bool,
    profile_name: str | None,
) -> None:
    def mutate(profile: ProviderProfile) -> None:
        value = _parse_or_raise(raw_value, value_type or ValueKind.STRING, permissive)
        _target_set(profile, target).add(name, value)

    profile = _edit_profile(ctx, f"{target} add", profile_name, mutate)
    typer.echo(f"Added `{name}` to {target} of `{profile.name}`.")


def _set_entry(
    ctx: typer.Context,
    target: str,
    name: str,
    raw_value: str,
    value_type: ValueKind | None,
    permissive: bool,
    profile_name: str | None,
) -> None:
    def mutate(profile: ProviderProfile) -> None:
        values = _target_set(profile, target)
        if value_type is None and name in values:
            policy = ParsePolicy.PERMISSIVE if permissive else ParsePolicy.STRICT
            result = values.edit(name, raw_value, policy)
            if result.error is not None:
                raise result.error
            return
        values.set(name, _parse_or_raise(raw_value, value_type or ValueKind.STRING, permissive))

    profile = _edit_profile(ctx, f"{target} set", profile_name, mutate)
    value = _target_set(profile, target).get(name)
    kind = value.kind.value if value is not None else "string"
    typer.echo(f"Set `{name}` [{kind}] in {target} of `{profile.name}`.")


def _remove_entry(ctx: typer.Context, target: str, name: str, profile_name: str | None) -> None:
    def mutate(profile: ProviderProfile) -> None:
        _target_set(profile, target).remove(name)

    profile = _edit_profile(ctx, f"{target} remove", profile_name, mutate)
    typer.echo(f"Removed `{name}` from {target} of `{profile.name}`.")


@params_app.command("add")
def params_add_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="New parameter name.")],
    value: Annotated[str, typer.Argument(help="Parameter value text.")],
    value_type: TypeOption = None,
    permissive: PermissiveOption = False,
    profile_name: ProfileOption = None,
) -> None:
    """Add a typed request parameter."""

    _add_entry(ctx, "params", name, value, value_type, permissive, profile_name)


@params_app.command("set")
def params_set_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Parameter name.")],
    value: Annotated[str, typer.Argument(help="Parameter value text.")],
    value_type: TypeOption = None,
    permissive: PermissiveOption = False,
    profile_name: ProfileOption = None,
) -> None:
    """Edit a parameter against its current kind, or insert it."""

    _set_entry(ctx, "params", name, value, value_type, permissive, profile_name)


@params_app.command("remove")
def params_remove_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Parameter name.")],
    profile_name: ProfileOption = None,
) -> None:
    """Remove a request parameter; `source_key` and `format` are protected."""

    _remove_entry(ctx, "params", name, profile_name)


@headers_app.command("add")
def headers_add_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="New header name.")],
    value: Annotated[str, typer.Argument(help="Header value text.")],
    value_type: TypeOption = None,
    permissive: PermissiveOption = False,
    profile_name: ProfileOption = None,
) -> None:
    """Add a typed request header."""

    _add_entry(ctx, "headers", name, value, value_type, permissive, profile_name)


@headers_app.command("set")
def headers_set_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Header name.")],
    value: Annotated[str, typer.Argument(help="Header value text.")],
    value_type: TypeOption = None,
    permissive: PermissiveOption = False,
    profile_name: ProfileOption = None,
) -> None:
    """Edit a header against its current kind, or insert it."""

    _set_entry(ctx, "headers", name, value, value_type, permissive, profile_name)


@headers_app.command("remove")
def headers_remove_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Header name.")],
    profile_name: ProfileOption = None,
) -> None:
    """Remove a request header."""

    _remove_entry(ctx, "headers", name, profile_name)


@app.command("options")
def options_command(
    ctx: typer.Context,
    preview: Annotated[
        bool | None,
        typer.Option("--preview/--no-preview", help="Preview audio before sending."),
    ] = None,
    cache: Annotated[
        bool | None,
        typer.Option("--cache/--no-cache", help="Keep raw audio under unique file names."),
    ] = None,
) -> None:
    """Show or change preview and audio cache options."""

    try:
        registry = _open_session(ctx).registry
        if preview is not None:
            registry.set_preview_enabled(preview)
        if cache is not None:
            registry.set_cache_enabled(cache)
        preview_enabled = registry.preview_enabled
        cache_enabled = registry.cache_enabled
    except Exception as exc:
        exit_with_command_error("options", exc)

    typer.echo(f"Preview: {'on' if preview_enabled else 'off'}")
    typer.echo(f"Audio cache: {'on' if cache_enabled else 'off'}")


@app.command("credentials")
def credentials_command(
    profile_name: Annotated[
        str,
        typer.Option("--profile", help="Profile the provider token belongs to."),
    ],
    set_token: Annotated[
        bool,
        typer.Option("--set-token", help="Prompt for a provider token and store it securely."),
    ] = False,
    clear_token: Annotated[
        bool,
        typer.Option("--clear-token", help="Clear the stored provider token."),
    ] = False,
) -> None:
    """Manage securely stored provider tokens."""

    if set_token and clear_token:
        exit_with_command_error(
            "credentials",
            CommandError(
                stage="credentials",
                detail="`--set-token` and `--clear-token` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_token:
        prompted_token = normalize_optional_string(
            typer.prompt(
                "Provider token (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_token is None:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail="No token entered.",
                    hint="Provide a non-empty token when using `--set-token`.",
                ),
            )
        try:
            credential_store.set_token(profile_name, prompted_token)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail=f"Failed to store token securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"Token for `{profile_name}` stored in secure credential storage.")
        return

    if clear_token:
        removed = credential_store.clear_token(profile_name)
        if removed:
            typer.echo(f"Stored token for `{profile_name}` cleared.")
        else:
            typer.echo(f"No stored token found for `{profile_name}`.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    typer.echo(f"Secure credential storage: {availability}")
    if credential_store.is_available():
        status = "present" if credential_store.get_token(profile_name) is not None else "not set"
        typer.echo(f"Stored token for `{profile_name}`: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
