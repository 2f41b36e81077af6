"""Configuration models and TOML loading.

Usage:
    >>> from db_dump.config import load_dump_config, BackupConfig, BackupEngine
"""

from db_dump.config.loader import load_dump_config
from db_dump.config.models import (
    ALL_DATABASES,
    BackupConfig,
    BackupEngine,
    CompressionSettings,
    DumpConfig,
    EncryptionSettings,
    merge_config,
)

__all__ = [
    "load_dump_config",
    "ALL_DATABASES",
    "BackupConfig",
    "BackupEngine",
    "CompressionSettings",
    "DumpConfig",
    "EncryptionSettings",
    "merge_config",
]
