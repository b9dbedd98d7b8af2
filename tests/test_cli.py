"""Tests for the root wonderform CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from wonderform import __version__
from wonderform.cli import cli


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("WONDERFORM_CONFIG", raising=False)


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "wonderform" in result.output
    assert "validate" in result.output
    assert "rules" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_config_option_accepted(cli_runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "custom.toml"
    config.write_text("[form]\nreset_on_submit = true\n")
    result = cli_runner.invoke(cli, ["-c", str(config), "rules"])
    assert result.exit_code == 0


def test_invalid_config_reported(cli_runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "wonderform.toml").write_text("[form\n")
    result = cli_runner.invoke(cli, ["rules"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output


def test_unknown_command(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["frobnicate"])
    assert result.exit_code == 2


def test_short_help_flag(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Check form data against declarative rule schemas." in result.output


def test_help_names_config_sources(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert "wonderform.toml" in result.output
    assert "WONDERFORM_CONFIG" in result.output


def test_config_option_rejects_directory(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(tmp_path), "rules"])
    assert result.exit_code == 2
