"""Configuration management for the GiftLink accounts service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_MONGO_URL = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME = "giftdb"
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000

_ENV_KEYS = {
    "jwt_secret": "JWT_SECRET",
    "mongo_url": "MONGO_URL",
    "database_name": "GIFTLINK_DB_NAME",
    "bcrypt_rounds": "GIFTLINK_BCRYPT_ROUNDS",
    "server_selection_timeout_ms": "GIFTLINK_MONGO_TIMEOUT_MS",
}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup and passed explicitly."""

    jwt_secret: str
    mongo_url: str = DEFAULT_MONGO_URL
    database_name: str = DEFAULT_DATABASE_NAME
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from raw values, validating as we go."""
        secret = str(data.get("jwt_secret") or "").strip()
        if not secret:
            raise ValueError("A JWT signing secret must be configured (set JWT_SECRET)")

        rounds = _parse_int(data.get("bcrypt_rounds"), "bcrypt_rounds", DEFAULT_BCRYPT_ROUNDS)
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")

        timeout = _parse_int(
            data.get("server_selection_timeout_ms"),
            "server_selection_timeout_ms",
            DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        )
        if timeout <= 0:
            raise ValueError("server_selection_timeout_ms must be positive")

        return Settings(
            jwt_secret=secret,
            mongo_url=str(data.get("mongo_url") or DEFAULT_MONGO_URL).strip(),
            database_name=str(data.get("database_name") or DEFAULT_DATABASE_NAME).strip(),
            bcrypt_rounds=rounds,
            server_selection_timeout_ms=timeout,
        )


def _parse_int(value: object, name: str, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the optional YAML configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    candidate = (Path(__file__).resolve().parent.parent / "config" / "giftlink.yaml").resolve(strict=False)
    if candidate.exists():
        return candidate
    return None


def _load_yaml(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return {str(key): value for key, value in raw.items()}


def load_settings(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from an optional YAML file overlaid with the environment."""

    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("GIFTLINK_CONFIG"))

    values: Dict[str, object] = {}
    if path is not None:
        values.update(_load_yaml(path))

    for key, env_name in _ENV_KEYS.items():
        raw = env.get(env_name)
        if raw is not None and raw.strip():
            values[key] = raw

    return Settings.from_dict(values)


__all__ = ["Settings", "load_settings", "resolve_config_path"]
