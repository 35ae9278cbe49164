"""CLI entrypoints for secpolicy commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .clients.base import HEAD_REVISION
from .config import ConfigError, load_config
from .errors import SecPolicyError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .report import render_json, render_text


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Subcommands suppress the default so `secpolicy -v check` is not reset to False.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Log discovery decisions, fallback lookups and API requests.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="secpolicy",
        description="Discover and analyze a repository's security disclosure policy.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Find the security policy of a repository and extract its signals.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="Repository path, or owner/repo with --provider github (defaults to current directory).",
    )
    check_parser.add_argument(
        "--provider",
        choices=("local", "github"),
        default=None,
        help="Repository provider (defaults to the configured provider).",
    )
    check_parser.add_argument(
        "--revision",
        default=HEAD_REVISION,
        help="Revision to inspect (GitHub provider only).",
    )
    check_parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not consult the organization's .github repository.",
    )
    check_parser.add_argument(
        "--config",
        default=None,
        help="Path to a .secpolicy.yml file or the directory containing it.",
    )
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for secpolicy commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "check":
        config_path = Path(args.config) if args.config else Path.cwd()
        try:
            config = load_config(config_path)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")

        orchestrator = Orchestrator(enable_fallback=not args.no_fallback)
        try:
            result = orchestrator.run(
                args.target,
                provider=args.provider,
                revision=args.revision,
                config=config,
            )
        except (SecPolicyError, ValueError) as exc:
            parser.exit(1, f"secpolicy check failed: {exc}\nRun with --verbose for more details.\n")

        output = render_json(result) if args.format == "json" else render_text(result)
        sys.stdout.write(output)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
