"""CLI parser and entrypoint tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from repodoc import cli
from repodoc.cli import _build_parser
from repodoc.tool import ToolResult


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "-v"])
    assert args.verbose is True
    assert args.command == "generate"


def test_generate_defaults() -> None:
    args = _build_parser().parse_args(["generate"])

    assert args.path == "."
    assert args.include_tests is False
    assert args.language == "English"
    assert args.output_dir is None
    assert args.config is None
    assert args.verbose is False


def test_generate_options() -> None:
    args = _build_parser().parse_args(
        [
            "generate",
            "some/repo",
            "--include-tests",
            "--language",
            "Polish",
            "--output-dir",
            "docs",
            "--config",
            "conf.yml",
        ]
    )

    assert args.path == "some/repo"
    assert args.include_tests is True
    assert args.language == "Polish"
    assert args.output_dir == "docs"
    assert args.config == Path("conf.yml")


def test_serve_options() -> None:
    args = _build_parser().parse_args(["serve", "--port", "9000"])

    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_main_exits_on_configuration_error(monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)

    def broken(config_path=None):
        raise cli.ConfigError("GEMINI_API_KEY is required")

    monkeypatch.setattr(cli, "load_settings", broken)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "."])

    assert excinfo.value.code == 1
    assert "GEMINI_API_KEY is required" in capsys.readouterr().err


def _patch_pipeline(monkeypatch, result: ToolResult) -> dict:
    calls: dict = {}

    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "load_settings", lambda config_path=None: "settings")
    monkeypatch.setattr(cli.Orchestrator, "from_settings", classmethod(lambda cls, settings: "orchestrator"))

    async def fake_generate(orchestrator, path, **kwargs):
        calls.update(orchestrator=orchestrator, path=path, **kwargs)
        return result

    monkeypatch.setattr(cli, "generate_documentation", fake_generate)
    return calls


def test_main_generate_prints_result(monkeypatch, capsys) -> None:
    calls = _patch_pipeline(monkeypatch, ToolResult(text="DOCUMENTATION GENERATED."))

    cli.main(["generate", "repo", "--language", "German", "--include-tests"])

    assert capsys.readouterr().out == "DOCUMENTATION GENERATED.\n"
    assert calls == {
        "orchestrator": "orchestrator",
        "path": "repo",
        "include_tests": True,
        "target_language": "German",
        "output_dir": None,
    }


def test_main_generate_exits_non_zero_on_error(monkeypatch, capsys) -> None:
    _patch_pipeline(monkeypatch, ToolResult(text="Error analyzing repository: boom", is_error=True))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "missing"])

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Error analyzing repository: boom" in captured.err
    assert captured.out == ""


def test_mcp_options() -> None:
    args = _build_parser().parse_args(["mcp", "--config", "conf.yml", "-v"])

    assert args.command == "mcp"
    assert args.config == Path("conf.yml")
    assert args.verbose is True


def test_main_mcp_starts_stdio_server(monkeypatch) -> None:
    started: list[object] = []
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "load_settings", lambda config_path=None: "settings")
    monkeypatch.setattr("repodoc.mcp_server.run_mcp_server", started.append)

    cli.main(["mcp"])

    assert started == ["settings"]
