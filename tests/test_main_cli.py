from pathlib import Path

from main import _parse_args


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"
    assert args.port == 3060


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_init_db_subcommand_accepts_config() -> None:
    args = _parse_args(["init-db", "--config", "config/giftlink.yaml"])
    assert args.command == "init-db"
    assert args.config == Path("config/giftlink.yaml")
