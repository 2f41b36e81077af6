"""Error types raised while planning or running a dump.

Two families exist:

- ``ConfigurationError`` -- detected before any process is started.
- ``ExecutionError`` -- detected after every pipeline stage has exited.

Neither is retried at this layer.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from db_dump.pipeline.models import PipelineResult


class DumpError(Exception):
    """Base class for all db-dump errors."""

    pass


class ConfigurationError(DumpError):
    """Raised when the dump cannot be planned from the given configuration."""

    pass


class MissingCheckpointDirError(ConfigurationError):
    """Raised when the xtrabackup checkpoint directory is unset or absent."""

    pass


class MissingCheckpointError(ConfigurationError):
    """Raised when an incremental run finds no checkpoint from a prior run."""

    pass


class UtilityNotFoundError(ConfigurationError):
    """Raised when a required command line utility cannot be located."""

    pass


class ExecutionError(DumpError):
    """Raised when one or more pipeline stages did not exit successfully."""

    def __init__(self, message: str, result: "PipelineResult | None" = None) -> None:
        super().__init__(message)
        self.result = result


# Prefix of every ExecutionError message
DUMP_FAILED = "Dump Failed!"
