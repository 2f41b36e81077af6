"""db-dump: MySQL backup pipelines built from declarative configuration.

Synthesizes the dump command for one of three engines (mysqldump,
innobackupex, xtrabackup), splices compression/encryption stages and runs
everything as a single OS pipeline writing one artifact.

Usage:
    from db_dump import BackupConfig, BackupEngine, perform_dump
    from db_dump import load_dump_config, Gzip, Utilities
"""

__version__ = "0.1.0"

# Config
from db_dump.config.loader import load_dump_config
from db_dump.config.models import (
    ALL_DATABASES,
    BackupConfig,
    BackupEngine,
    DumpConfig,
    merge_config,
)

# Collaborators
from db_dump.compression import Bzip2, CustomCompressor, Gzip, create_compressor
from db_dump.encryption import AgeEncryptor

# Engines and pipeline
from db_dump.engines import DumpTarget, get_builder
from db_dump.pipeline import PipelineOrchestrator, PipelineResult, Stage, wrap_with_sudo
from db_dump.utilities import Utilities
from db_dump.validation import validate_incremental

# Run
from db_dump.dump import DumpOutcome, perform_dump, plan_dump, report_result

# Errors
from db_dump.errors import (
    ConfigurationError,
    DumpError,
    ExecutionError,
    MissingCheckpointDirError,
    MissingCheckpointError,
    UtilityNotFoundError,
)

__all__ = [
    # Config
    "load_dump_config",
    "ALL_DATABASES",
    "BackupConfig",
    "BackupEngine",
    "DumpConfig",
    "merge_config",
    # Collaborators
    "Gzip",
    "Bzip2",
    "CustomCompressor",
    "create_compressor",
    "AgeEncryptor",
    # Engines and pipeline
    "DumpTarget",
    "get_builder",
    "PipelineOrchestrator",
    "PipelineResult",
    "Stage",
    "wrap_with_sudo",
    "Utilities",
    "validate_incremental",
    # Run
    "DumpOutcome",
    "perform_dump",
    "plan_dump",
    "report_result",
    # Errors
    "DumpError",
    "ConfigurationError",
    "MissingCheckpointDirError",
    "MissingCheckpointError",
    "UtilityNotFoundError",
    "ExecutionError",
]
