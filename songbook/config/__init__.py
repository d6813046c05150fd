"""
Configuration management for Songbook.

Settings are resolved in layers, later layers winning:

1. built-in defaults (`Settings()`)
2. an optional TOML file (`songbook.toml` in the working directory, or an
   explicit path)
3. `SONGBOOK_*` environment variables
4. command line flags (applied by `songbook.__main__`)
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("songbook.toml")

ENV_HOST = "SONGBOOK_HOST"
ENV_PORT = "SONGBOOK_PORT"
ENV_DB_PATH = "SONGBOOK_DB_PATH"
ENV_CORS_ORIGINS = "SONGBOOK_CORS_ORIGINS"


class ConfigError(Exception):
    """Raised when a configuration source holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    """Resolved server settings."""

    host: str = "0.0.0.0"
    port: int = 5050
    db_path: str = "songbook.sqlite3"
    # Empty means every origin may write.
    allowed_origins: tuple[str, ...] = ()
    api_prefix: str = "/song"
    log_level: str = "INFO"

    @property
    def open_writes(self) -> bool:
        """True if write requests are accepted from any origin."""
        return not self.allowed_origins


def parse_origins(value: str | list[Any] | tuple[Any, ...] | None) -> tuple[str, ...]:
    """
    Parse an origin allow-list.

    Accepts a comma-separated string (environment form) or a list (TOML form).
    Entries are trimmed and empty entries dropped.
    """
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else [str(v) for v in value]
    return tuple(item.strip() for item in items if item.strip())


def _parse_port(value: Any, source: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid port in {source}: {value!r}") from e
    if not 0 <= port <= 65535:
        raise ConfigError(f"Port out of range in {source}: {port}")
    return port


def _apply_toml(settings: Settings, data: Mapping[str, Any], source: str) -> Settings:
    server = data.get("server", {})
    database = data.get("database", {})
    cors = data.get("cors", {})

    changes: dict[str, Any] = {}
    if "host" in server:
        changes["host"] = str(server["host"])
    if "port" in server:
        changes["port"] = _parse_port(server["port"], source)
    if "api_prefix" in server:
        changes["api_prefix"] = str(server["api_prefix"])
    if "log_level" in server:
        changes["log_level"] = str(server["log_level"]).upper()
    if "path" in database:
        changes["db_path"] = str(database["path"])
    if "allowed_origins" in cors:
        changes["allowed_origins"] = parse_origins(cors["allowed_origins"])
    return replace(settings, **changes)


def _apply_env(settings: Settings, environ: Mapping[str, str]) -> Settings:
    changes: dict[str, Any] = {}
    if environ.get(ENV_HOST):
        changes["host"] = environ[ENV_HOST]
    if environ.get(ENV_PORT):
        changes["port"] = _parse_port(environ[ENV_PORT], ENV_PORT)
    if environ.get(ENV_DB_PATH):
        changes["db_path"] = environ[ENV_DB_PATH]
    if ENV_CORS_ORIGINS in environ:
        changes["allowed_origins"] = parse_origins(environ[ENV_CORS_ORIGINS])
    return replace(settings, **changes)


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load settings from defaults, TOML and environment.

    Args:
        config_path: Path to a TOML file. If None, `songbook.toml` in the
            working directory is used when it exists. An explicit path must exist.
        environ: Environment mapping. Defaults to `os.environ`.

    Returns:
        The resolved Settings instance.
    """
    settings = Settings()

    path = config_path if config_path is not None else DEFAULT_CONFIG_FILE
    if config_path is not None or path.exists():
        logger.debug("Loading config from %s", path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        settings = _apply_toml(settings, data, str(path))

    return _apply_env(settings, os.environ if environ is None else environ)


# Global singleton instance (lazy loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings (lazy loaded singleton)."""
    global _settings

    if _settings is None:
        _settings = load_settings()

    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Force reload of the global settings."""
    global _settings
    _settings = load_settings(config_path)
    return _settings
