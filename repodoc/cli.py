"""CLI entrypoints for repodoc commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError, load_settings
from .logging import configure_logging
from .orchestrator import Orchestrator
from .tool import DEFAULT_TARGET_LANGUAGE, generate_documentation


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .repodoc.yml file or the directory containing it.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repodoc",
        description="Generate project documentation from repository content and git history.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze a local repository and generate documentation.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--include-tests",
        action="store_true",
        help="Include files whose path mentions 'test' in the analysis.",
    )
    generate_parser.add_argument(
        "--language",
        default=DEFAULT_TARGET_LANGUAGE,
        help="Language the documents should be written in (default: English).",
    )
    generate_parser.add_argument(
        "--output-dir",
        default=None,
        help="Write one markdown file per document here (relative to the repository path).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    mcp_parser = subparsers.add_parser(
        "mcp",
        help="Run the MCP server on stdio.",
    )
    _add_verbose_option(mcp_parser, suppress_default=True)
    _add_config_option(mcp_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repodoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "generate":
        orchestrator = Orchestrator.from_settings(settings)
        result = asyncio.run(
            generate_documentation(
                orchestrator,
                args.path,
                include_tests=bool(args.include_tests),
                target_language=args.language,
                output_dir=args.output_dir,
            )
        )
        if result.is_error:
            parser.exit(1, f"{result.text}\nRun with --verbose for more details.\n")
        print(result.text)
    elif args.command == "serve":
        from .service.app import run_service

        run_service(settings, host=args.host, port=args.port)
    elif args.command == "mcp":
        from .mcp_server import run_mcp_server

        run_mcp_server(settings)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
