"""TOML loader for dump configuration files."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from db_dump.config.models import (
    BackupConfig,
    CompressionSettings,
    DumpConfig,
    EncryptionSettings,
    merge_config,
)
from db_dump.errors import ConfigurationError


def load_dump_config(config_path: Path) -> DumpConfig:
    """Load dump configuration from a TOML file.

    ``[defaults]`` becomes a base ``BackupConfig``; every
    ``[databases.<id>]`` table is applied over it with ``merge_config()``,
    so keys in the database table win. The ``<id>`` becomes the
    ``database_id`` of that config.

    Args:
        config_path: Path to the TOML file

    Returns:
        DumpConfig with one BackupConfig per database

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If the file is not valid TOML or any table
            fails validation
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Dump config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"{config_path}: invalid TOML: {e}") from e

    if "dump_path" not in data:
        raise ConfigurationError(f"{config_path}: 'dump_path' is required")
    if not isinstance(data["dump_path"], str):
        raise ConfigurationError(f"{config_path}: 'dump_path' must be a string")
    for key in ("defaults", "databases", "compression", "encryption", "utilities"):
        if key in data and not isinstance(data[key], dict):
            raise ConfigurationError(f"{config_path}: '{key}' must be a table")

    try:
        base = BackupConfig(**data.get("defaults", {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid [defaults] table:\n{e}") from e

    databases = {}
    for database_id, table in data.get("databases", {}).items():
        if not isinstance(table, dict):
            raise ConfigurationError(
                f"{config_path}: 'databases.{database_id}' must be a table"
            )
        try:
            databases[database_id] = merge_config(
                base, **{**table, "database_id": database_id}
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration for database '{database_id}':\n{e}"
            ) from e

    if not databases:
        raise ConfigurationError(f"{config_path}: no [databases.*] tables defined")

    try:
        return DumpConfig(
            dump_path=Path(data["dump_path"]),
            databases=databases,
            compression=(
                CompressionSettings(**data["compression"]) if "compression" in data else None
            ),
            encryption=(
                EncryptionSettings(**data["encryption"]) if "encryption" in data else None
            ),
            utilities=data.get("utilities", {}),
        )
    except ValidationError as e:
        raise ConfigurationError(f"{config_path}: invalid settings:\n{e}") from e
