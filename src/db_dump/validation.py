"""Pre-flight checks for xtrabackup checkpoint lineage.

xtrabackup writes ``xtrabackup_checkpoints`` into ``--extra-lsndir``
after each run. An incremental run continues from that file, so it must
already exist; a full run that starts a lineage needs the directory to
exist. This module only reads the filesystem, it never creates or
modifies the marker.
"""

import logging

from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.errors import MissingCheckpointDirError, MissingCheckpointError

logger = logging.getLogger(__name__)

CHECKPOINT_MARKER = "xtrabackup_checkpoints"


def validate_incremental(config: BackupConfig) -> None:
    """Check checkpoint preconditions before any command is built.

    Only applies to the xtrabackup engine; other engines pass untouched.

    Raises:
        MissingCheckpointDirError: ``incremental`` without ``checkpoint_dir``,
            or a full run whose ``checkpoint_dir`` does not exist
        MissingCheckpointError: ``incremental`` with no marker from a prior run
    """
    if config.engine is not BackupEngine.XTRABACKUP:
        return

    checkpoint_dir = config.checkpoint_dir

    if config.incremental:
        if checkpoint_dir is None:
            raise MissingCheckpointDirError(
                "Option checkpoint_dir missing for xtrabackup incremental backups."
            )
        if not (checkpoint_dir / CHECKPOINT_MARKER).exists():
            raise MissingCheckpointError(
                f'Checkpoint missing from last backup in "{checkpoint_dir}": '
                f"(Forgot to make a full backup or to set option checkpoint_dir "
                f"also for full backups?)"
            )
        logger.debug("Continuing incremental lineage from %s", checkpoint_dir)
    elif checkpoint_dir is not None:
        if not checkpoint_dir.is_dir():
            raise MissingCheckpointDirError(
                f'Directory "{checkpoint_dir}" for option checkpoint_dir does not exist.'
            )
