from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from txn_import.models.config_models import DatabaseConfig, EndpointConfig, ImportConfig

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults and environment overrides (.env is loaded by the CLI first)

Environment precedence for connection settings:
    TXN_IMPORT_ENDPOINT / TXN_INSERT_ENDPOINT / TXN_DELETE_ENDPOINT > endpoints.*
    DATABASE_URL / PGDSN > database.dsn
    PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE > database.*
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _env_int(name: str, fallback: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return fallback
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer: {raw!r}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    ep_raw = data.get("endpoints") or {}
    endpoints = EndpointConfig(
        import_url=os.getenv("TXN_IMPORT_ENDPOINT") or ep_raw.get("import"),
        insert_url=os.getenv("TXN_INSERT_ENDPOINT") or ep_raw.get("insert"),
        delete_url=os.getenv("TXN_DELETE_ENDPOINT") or ep_raw.get("delete"),
    )

    db_raw = data.get("database") or {}
    database = DatabaseConfig(
        host=os.getenv("PGHOST") or db_raw.get("host"),
        port=_env_int("PGPORT", db_raw.get("port")),
        user=os.getenv("PGUSER") or db_raw.get("user"),
        password=os.getenv("PGPASSWORD") or db_raw.get("password"),
        database=os.getenv("PGDATABASE") or db_raw.get("database"),
        dsn=os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_raw.get("dsn"),
    )

    backend = data["backend"]
    if backend == "http" and not endpoints.import_url:
        raise ConfigError("backend 'http' requires endpoints.import or TXN_IMPORT_ENDPOINT")

    return ImportConfig(
        backend=backend,
        endpoints=endpoints,
        database=database,
        store_path=data["store_path"],
        timeout_seconds=data.get("timeout_seconds"),
        warning_display_limit=data.get("warning_display_limit", 5),
        table=data.get("table", "transactions"),
    )
