"""Integration tests for credential management and settings resolution errors."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from chatvoice.cli import app


def test_credentials_set_status_and_clear(credential_store) -> None:  # type: ignore[no-untyped-def]
    """Tokens are stored per profile and never echoed back."""

    runner = CliRunner()

    stored = runner.invoke(app, ["credentials", "--profile", "minimax", "--set-token"], input="  tok-1  \n")
    status = runner.invoke(app, ["credentials", "--profile", "minimax"])
    cleared = runner.invoke(app, ["credentials", "--profile", "minimax", "--clear-token"])
    cleared_again = runner.invoke(app, ["credentials", "--profile", "minimax", "--clear-token"])

    assert stored.exit_code == 0, stored.output
    assert "tok-1" not in stored.output
    assert "Stored token for `minimax`: present" in status.output
    assert "Stored token for `minimax` cleared." in cleared.output
    assert "No stored token found for `minimax`." in cleared_again.output
    assert credential_store.tokens == {}


def test_credentials_rejects_conflicting_actions() -> None:
    """Setting and clearing in one call is refused."""

    result = CliRunner().invoke(
        app,
        ["credentials", "--profile", "p", "--set-token", "--clear-token"],
    )

    assert result.exit_code == 1
    assert "cannot be used together" in result.output


def test_missing_config_file_reports_stage_and_hint(tmp_path: Path) -> None:
    """A missing settings file fails at the config stage."""

    result = CliRunner().invoke(
        app,
        ["--config", str(tmp_path / "missing.yml"), "--data-dir", str(tmp_path), "profiles", "list"],
    )

    assert result.exit_code == 1
    assert "failed at stage `config`" in result.output
    assert "Hint: Provide an existing path" in result.output


def test_invalid_config_value_reports_stage(tmp_path: Path) -> None:
    """Invalid settings values are reported with a fix hint."""

    config_path = tmp_path / "chatvoice.yml"
    config_path.write_text("sample_rate: -5\n", encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["--config", str(config_path), "--data-dir", str(tmp_path), "options"],
    )

    assert result.exit_code == 1
    assert "Invalid settings" in result.output


def test_config_file_data_dir_is_used(tmp_path: Path) -> None:
    """The settings file can point the CLI at a data directory."""

    data_dir = tmp_path / "from-config"
    config_path = tmp_path / "chatvoice.yml"
    config_path.write_text(f"data_dir: {data_dir}\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["--config", str(config_path), "profiles", "list"])

    assert result.exit_code == 0, result.output
    assert (data_dir / "profiles" / "default.json").exists()


def test_corrupt_options_file_reports_persistence_hint(tmp_path: Path) -> None:
    """Corrupt stored options surface as persistence errors."""

    (tmp_path / "text_to_speech.json").write_text("{oops", encoding="utf-8")

    result = CliRunner().invoke(app, ["--data-dir", str(tmp_path), "profiles", "list"])

    assert result.exit_code == 1
    assert "not valid JSON" in result.output
    assert "Hint: Check that the data directory is writable." in result.output
