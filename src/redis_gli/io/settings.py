"""Settings file I/O and runtime configuration for redis-gli.

Reads a user-edited JSON settings file at XDG_CONFIG_HOME/redis-gli/settings.json.
Connection defaults, limits and key binding overrides are top-level keys.

// [LAW:one-source-of-truth] Config defaults live in DEFAULTS.
// [LAW:dataflow-not-control-flow] Precedence is a merge order:
//   DEFAULTS < settings file < environment < explicit overrides.

This module is a STABLE BOUNDARY.
Import as: import redis_gli.io.settings
"""

import json
import os
from dataclasses import dataclass, field, fields
from importlib import metadata
from pathlib import Path


DEFAULTS: dict[str, object] = {
    "host": "127.0.0.1",
    "port": 6379,
    "db": 0,
    "password": None,
    "max_key_limit": 1000,
    "status_refresh_seconds": 30.0,
    "output_max_lines": 1000,
    "debug": False,
    "key_bindings": {},
}

# Environment variable → settings key, with the type used to parse it.
ENV_VARS: dict[str, tuple[str, type]] = {
    "REDIS_GLI_HOST": ("host", str),
    "REDIS_GLI_PORT": ("port", int),
    "REDIS_GLI_DB": ("db", int),
    "REDIS_GLI_PASSWORD": ("password", str),
    "REDIS_GLI_MAX_KEYS": ("max_key_limit", int),
    "REDIS_GLI_REFRESH": ("status_refresh_seconds", float),
}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class Config:
    """Resolved runtime configuration."""

    host: str = "127.0.0.1"
    port: int = 6379
    db: int = 0
    password: str | None = None
    max_key_limit: int = 1000
    status_refresh_seconds: float = 30.0
    output_max_lines: int = 1000
    debug: bool = False
    key_bindings: dict = field(default_factory=dict)
    version: str = "0.0.0"
    git_commit: str = "unknown"

    @property
    def short_commit(self) -> str:
        return self.git_commit[:8]


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / redis-gli / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "redis-gli" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def package_version() -> str:
    try:
        return metadata.version("redis-gli")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _env_settings(environ) -> dict:
    values = {}
    for var, (key, parse) in ENV_VARS.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[key] = parse(raw)
        except ValueError as e:
            raise ConfigError(f"{var}={raw!r}: {e}") from e
    return values


def _validate(merged: dict) -> None:
    if int(merged["max_key_limit"]) <= 0:
        raise ConfigError("max_key_limit must be positive")
    if float(merged["status_refresh_seconds"]) <= 0:
        raise ConfigError("status_refresh_seconds must be positive")
    if int(merged["output_max_lines"]) <= 0:
        raise ConfigError("output_max_lines must be positive")
    if not isinstance(merged["key_bindings"], dict):
        raise ConfigError("key_bindings must be a mapping of action to key list")


def resolve_config(overrides: dict | None = None, environ=None) -> Config:
    """Build Config from defaults, settings file, environment and overrides.

    Override values of None are ignored so argparse namespaces can be passed
    through unfiltered.
    """
    environ = os.environ if environ is None else environ
    disk = load_settings()
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in disk.items() if k in DEFAULTS})
    merged.update(_env_settings(environ))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None and k in DEFAULTS})
    _validate(merged)

    known = {f.name for f in fields(Config)}
    return Config(
        **{k: v for k, v in merged.items() if k in known},
        version=package_version(),
        git_commit=environ.get("REDIS_GLI_GIT_COMMIT", "unknown") or "unknown",
    )
