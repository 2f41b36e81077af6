"""Hot copy via ``innobackupex``, archived with ``tar``.

The stage is a single AND-chain:

1. create -- copy data files into the staging directory
2. prepare -- ``--apply-log`` (only when ``prepare_backup`` is set)
3. archive -- ``tar --remove-files`` the staging directory to stdout
"""

from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.engines.base import (
    CommandTemplate,
    DumpTarget,
    connectivity_options,
    credential_options,
    passthrough,
)
from db_dump.pipeline.models import Command, Stage
from db_dump.utilities import Utilities


class InnobackupexBuilder:
    engine = BackupEngine.INNOBACKUPEX
    extension = "tar"

    def build(
        self,
        config: BackupConfig,
        target: DumpTarget,
        utilities: Utilities,
    ) -> CommandTemplate:
        innobackupex = utilities.resolve("innobackupex")
        staging_dir = str(target.staging_dir)
        quiet = not config.verbose

        commands = [
            Command(
                innobackupex,
                (
                    *credential_options(config),
                    *connectivity_options(config),
                    *passthrough(config.additional_options),
                    "--no-timestamp",
                    staging_dir,
                ),
                quiet=quiet,
            )
        ]
        if config.prepare_backup:
            commands.append(
                Command(
                    innobackupex,
                    ("--apply-log", staging_dir, *passthrough(config.prepare_options)),
                    quiet=quiet,
                )
            )
        commands.append(
            Command(
                utilities.resolve("tar"),
                (
                    "--remove-files",
                    "-cf",
                    "-",
                    "-C",
                    str(target.dump_path),
                    target.staging_dir.name,
                ),
            )
        )

        return CommandTemplate(
            stage=Stage(label="innobackupex", commands=tuple(commands)),
            extension=self.extension,
        )
