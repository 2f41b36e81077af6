"""Streaming (optionally incremental) backup via ``xtrabackup``.

Checkpoint preconditions are enforced by
``db_dump.validation.validate_incremental`` before this builder runs.
"""

from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.engines.base import CommandTemplate, DumpTarget
from db_dump.pipeline.models import Arg, Command, Option, Stage
from db_dump.utilities import Utilities


class XtrabackupBuilder:
    engine = BackupEngine.XTRABACKUP
    extension = "xbstream"

    def build(
        self,
        config: BackupConfig,
        target: DumpTarget,
        utilities: Utilities,
    ) -> CommandTemplate:
        args: list[Arg] = ["--backup", "--stream=xbstream"]
        if config.checkpoint_dir is not None:
            checkpoint_dir = str(config.checkpoint_dir)
            args.append(Option("--extra-lsndir", checkpoint_dir, quote='"'))
            if config.incremental:
                args.append(Option("--incremental-basedir", checkpoint_dir, quote='"'))

        command = Command(
            utilities.resolve("xtrabackup"),
            tuple(args),
            quiet=not config.verbose,
        )
        return CommandTemplate(
            stage=Stage(label="xtrabackup", commands=(command,)),
            extension=self.extension,
        )
