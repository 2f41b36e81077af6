"""Pydantic models for dump configuration."""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Value of ``BackupConfig.name`` meaning "dump every database"
ALL_DATABASES = "all"


class BackupEngine(str, Enum):
    """Backup engine used to produce the dump stream."""

    MYSQLDUMP = "mysqldump"        # logical SQL dump
    INNOBACKUPEX = "innobackupex"  # hot copy + apply-log, tar-ed
    XTRABACKUP = "xtrabackup"      # xbstream, optionally incremental


# ============================================================================
# Per-database configuration
# ============================================================================


class BackupConfig(BaseModel):
    """Everything needed to synthesize the dump command for one database.

    Instances are immutable. Use ``merge_config()`` to derive a variant.

    Example:
        >>> config = BackupConfig(name="shop", username="backup", skip_tables=["sessions"])
        >>> config.engine
        <BackupEngine.MYSQLDUMP: 'mysqldump'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    database_id: str | None = None
    name: str = ALL_DATABASES

    # Credentials
    username: str | None = None
    password: str | None = None

    # Connectivity (socket wins over host/port)
    host: str | None = None
    port: int | None = None
    socket: str | None = None

    # Table filters
    skip_tables: tuple[str, ...] = ()
    only_tables: tuple[str, ...] = ()  # ignored when dumping all databases

    # Raw passthrough fragments
    additional_options: tuple[str, ...] = ()
    prepare_options: tuple[str, ...] = ()

    engine: BackupEngine = BackupEngine.MYSQLDUMP
    prepare_backup: bool = True           # innobackupex only
    checkpoint_dir: Path | None = None    # xtrabackup only (--extra-lsndir)
    incremental: bool = False             # xtrabackup only

    sudo_user: str | None = None
    verbose: bool = False

    @field_validator("checkpoint_dir", mode="before")
    @classmethod
    def _blank_checkpoint_dir(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_engine_options(self) -> "BackupConfig":
        if self.incremental and self.engine is not BackupEngine.XTRABACKUP:
            raise ValueError(
                f"incremental backups require the xtrabackup engine, "
                f"not {self.engine.value}"
            )
        return self

    @property
    def dump_all(self) -> bool:
        """True when every database is dumped."""
        return self.name == ALL_DATABASES

    @property
    def dump_filename(self) -> str:
        """Base name of the artifact (without extension)."""
        if self.database_id:
            return f"MySQL-{self.database_id}"
        return "MySQL"


def merge_config(base: BackupConfig, **overrides: Any) -> BackupConfig:
    """Return a new validated config with ``overrides`` applied over ``base``.

    Example:
        >>> nightly = merge_config(defaults, name="shop", database_id="shop")
    """
    data = base.model_dump(exclude_unset=True)
    data.update(overrides)
    return BackupConfig.model_validate(data)


# ============================================================================
# Collaborator settings
# ============================================================================


class CompressionSettings(BaseModel):
    """``[compression]`` table."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["gzip", "bzip2", "custom"] = "gzip"
    level: int | None = Field(default=None, ge=1, le=9)
    rsyncable: bool = False        # gzip only
    command: str | None = None     # custom only
    extension: str | None = None   # custom only

    @model_validator(mode="after")
    def _check_custom(self) -> "CompressionSettings":
        if self.type == "custom" and not (self.command and self.extension):
            raise ValueError("custom compression needs both 'command' and 'extension'")
        return self


class EncryptionSettings(BaseModel):
    """``[encryption]`` table (age recipients)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    recipient: str | None = None
    recipients_file: str | None = None


# ============================================================================
# Config file
# ============================================================================


class DumpConfig(BaseModel):
    """Complete dump configuration loaded from a TOML file."""

    model_config = ConfigDict(frozen=True)

    dump_path: Path
    databases: dict[str, BackupConfig]
    compression: CompressionSettings | None = None
    encryption: EncryptionSettings | None = None
    utilities: dict[str, str] = Field(default_factory=dict)
