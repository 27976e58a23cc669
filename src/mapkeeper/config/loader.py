"""Config loading from JSON files and the process environment."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from mapkeeper.contracts.config import MapKeeperConfig
from mapkeeper.contracts.exceptions import ConfigError

_ENV_FIELDS = {
    "MAPKEEPER_DATABASE_URL": "database_url",
    "MAPKEEPER_DELETE_AFTER_DAYS": "delete_after_days",
    "MAPKEEPER_SWEEP_INTERVAL_SECONDS": "sweep_interval_seconds",
    "MAPKEEPER_STORE_TIMEOUT_SECONDS": "store_timeout_seconds",
    "MAPKEEPER_ECHO_SQL": "echo_sql",
}
_LEGACY_DELETE_AFTER_DAYS = "DELETE_AFTER_DAYS"


def _resolve_sqlite_url(database_url: str, *, base_dir: Path) -> str:
    try:
        url = make_url(database_url)
    except ArgumentError as exc:
        raise ConfigError(f"invalid database_url: {database_url}") from exc

    if not url.drivername.startswith("sqlite"):
        return database_url
    database = url.database
    if not database or database == ":memory:" or Path(database).is_absolute():
        return database_url
    return url.set(database=str((base_dir / database).resolve())).render_as_string(hide_password=False)


def load_config(path: str | Path) -> MapKeeperConfig:
    """Load and validate config from JSON, resolving relative SQLite paths against the config directory."""
    config_path = Path(path).expanduser().resolve()

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = MapKeeperConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(
        update={"database_url": _resolve_sqlite_url(parsed.database_url, base_dir=config_path.parent)}
    )


def config_from_env(environ: Mapping[str, str] | None = None) -> MapKeeperConfig:
    """Build config from ``MAPKEEPER_*`` variables; unset variables keep their defaults."""
    env = os.environ if environ is None else environ
    payload: dict[str, str] = {}
    legacy_days = env.get(_LEGACY_DELETE_AFTER_DAYS, "").strip()
    if legacy_days:
        payload["delete_after_days"] = legacy_days
    for variable, field in _ENV_FIELDS.items():
        value = env.get(variable, "").strip()
        if value:
            payload[field] = value

    try:
        return MapKeeperConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid environment config: {exc}") from exc
