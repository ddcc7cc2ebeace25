"""CLI entry point for fedsearch."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from fedsearch.config.settings import Settings


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Subcommands:
      - ``search``: run one federated search and print the result as JSON.
      - ``serve``: start the HTTP API.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = _load_settings(args.config)
    if args.log_level:
        settings.observability.log_level = args.log_level

    from fedsearch.observability.logging import setup_logging

    setup_logging(settings.observability)

    if args.command == "serve":
        return _serve(args, settings)
    return _search(args, settings)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fedsearch",
        description="fedsearch — aggregate OpenSearch results from many endpoints",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"fedsearch {_get_version()}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Run a federated search and print JSON results")
    search.add_argument("urls", nargs="*", help="Source URLs (default: configured URLs)")
    search.add_argument("--timeout", "-t", type=float, default=None, help="Per-request timeout in seconds")
    search.add_argument(
        "--field",
        "-f",
        dest="fields",
        action="append",
        default=None,
        help="Field to read off XML feed entries (repeatable)",
    )
    search.add_argument("--workers", "-w", type=int, default=None, help="Max concurrent requests")
    search.add_argument(
        "--lenient",
        action="store_true",
        help="Skip sources with an unsupported content type instead of failing",
    )

    serve = sub.add_parser("serve", help="Start the HTTP API server")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")

    return parser


def _load_settings(config: str | None) -> Settings:
    if config:
        config_path = Path(config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        return Settings.from_yaml(config_path)
    return Settings()


def _search(args: argparse.Namespace, settings: Settings) -> int:
    from fedsearch.core.exceptions import FederatedSearchError
    from fedsearch.core.federated import FederatedSearch

    fed = settings.federation
    searcher = FederatedSearch(
        args.urls or fed.urls,
        timeout=args.timeout or fed.timeout,
        fields=args.fields or fed.fields,
        max_workers=args.workers or fed.max_workers,
        unsupported_content="lenient" if args.lenient else fed.unsupported_content,
        user_agent=fed.user_agent,
    )

    try:
        result = searcher.search_sync()
    except FederatedSearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(), ensure_ascii=False, indent=2))
    return 0


def _serve(args: argparse.Namespace, settings: Settings) -> int:
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port

    import uvicorn

    from fedsearch.api.app import create_app

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.observability.log_level.lower(),
    )
    return 0


def _get_version() -> str:
    """Get the package version."""
    try:
        from fedsearch import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    sys.exit(main())
