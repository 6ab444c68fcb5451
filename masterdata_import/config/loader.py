from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the YAML config (default config/import.yml)
- Validate it against the packaged JSON schema (unknown keys rejected)
- Apply defaults for every optional key

Database credentials given here are only a fallback; environment variables
(DATABASE_URL / PG*) take precedence, see db.connection.
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "SyncConfig",
    "ImportConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class SyncConfig:
    chunk_size: int = 20  # 1 リクエストあたりの行数
    concurrency: int = 5  # 同時送信バッチ数の上限


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration for parsing, validating and syncing one upload."""
    table_name: str = "MasterData"
    max_file_size_mb: float = 10
    header_scan_rows: int = 20
    min_header_matches: int = 3
    logs_directory: str = "./logs"
    sync: SyncConfig = field(default_factory=SyncConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or unreadable, or the data
            violates the schema (missing/extra keys, wrong types).
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


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    defaults = ImportConfig()
    sync_raw = data.get("sync") or {}
    db_raw = data.get("database") or {}
    return ImportConfig(
        table_name=data.get("table_name", defaults.table_name),
        max_file_size_mb=data.get("max_file_size_mb", defaults.max_file_size_mb),
        header_scan_rows=data.get("header_scan_rows", defaults.header_scan_rows),
        min_header_matches=data.get("min_header_matches", defaults.min_header_matches),
        logs_directory=data.get("logs_directory", defaults.logs_directory),
        sync=SyncConfig(
            chunk_size=sync_raw.get("chunk_size", defaults.sync.chunk_size),
            concurrency=sync_raw.get("concurrency", defaults.sync.concurrency),
        ),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )
