"""Command-line interface for the GiftLink accounts service."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from giftlink.config import Settings, load_settings
from giftlink.database import DatabaseProvider, UserStore

logger = logging.getLogger("giftlink.main")

_DEFAULT_PORT = 3060


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GiftLink accounts service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    init_parser = subparsers.add_parser("init-db", help="Create the indexes required by the accounts store")
    init_parser.add_argument("--config", type=Path, default=None, help="Path to a YAML settings file")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP accounts service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=_DEFAULT_PORT,
        help=f"Port for the HTTP API (default: {_DEFAULT_PORT})",
    )
    serve_parser.add_argument("--config", type=Path, default=None, help="Path to a YAML settings file")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> DatabaseProvider:
    provider = DatabaseProvider.from_settings(settings)
    UserStore(provider).initialize()
    logger.info("Email index ensured on database '%s'", provider.database_name)
    return provider


def _serve(*, settings: Settings, provider: DatabaseProvider, host: str, port: int) -> None:
    from giftlink.service import create_app
    import uvicorn

    logger.info("Starting accounts API on http://%s:%s", host, port)

    app = create_app(settings, provider=provider)
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        provider.close()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    load_dotenv()

    args = _parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    provider = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, provider=provider, host=args.host, port=args.port)
    elif args.command == "init-db":
        provider.close()
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
