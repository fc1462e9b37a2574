"""Unit tests for the intakebot CLI."""

from __future__ import annotations

import runpy
import sys

import pytest
from click.testing import CliRunner

from intakebot.cli.main import cli


def test_version_option() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "intakebot" in result.output


def test_cli_main_runs_as_module(monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["intakebot", "--help"])
    sys.modules.pop("intakebot.cli.main", None)
    with pytest.raises(SystemExit) as excinfo:
        runpy.run_module("intakebot.cli.main", run_name="__main__")
    assert excinfo.value.code == 0


def test_fields_lists_schema() -> None:
    result = CliRunner().invoke(cli, ["fields", "marketing"])
    assert result.exit_code == 0
    assert "marketing requirements" in result.output
    assert "budget" in result.output


def test_fields_rejects_unknown_category() -> None:
    result = CliRunner().invoke(cli, ["fields", "astrology"])
    assert result.exit_code != 0
    assert "astrology" in result.output


def test_config_show_prints_table(monkeypatch) -> None:
    monkeypatch.setenv("LLAMA_STACK_URL", "http://localhost:5000")
    monkeypatch.setenv("ENVIRONMENT", "test")

    result = CliRunner().invoke(cli, ["config", "show"])
    assert result.exit_code == 0
    assert "intakebot Configuration" in result.output
    assert "http://localhost:5000" in result.output
    assert "fake" in result.output


def test_chat_session_with_fake_oracle() -> None:
    result = CliRunner().invoke(
        cli,
        ["chat", "--user-id", "u-1"],
        input="I need a website\n/session\n/sessions\n/quit\n",
    )

    assert result.exit_code == 0, result.output
    assert "Could you tell me" in result.output
    assert "web_development" in result.output
    assert "Sessions" in result.output


def test_chat_ends_cleanly_on_eof() -> None:
    result = CliRunner().invoke(cli, ["chat"], input="/session\n")
    assert result.exit_code == 0, result.output
    assert "No session yet." in result.output


def test_chat_fails_when_oracle_disabled(monkeypatch) -> None:
    monkeypatch.setenv("LLAMA_STACK_PROVIDER", "off")

    result = CliRunner().invoke(cli, ["chat"], input="/quit\n")
    assert result.exit_code == 1
    assert "disabled" in result.output
