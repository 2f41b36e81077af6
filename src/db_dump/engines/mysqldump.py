"""Logical SQL dump via ``mysqldump``."""

from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.engines.base import (
    CommandTemplate,
    DumpTarget,
    connectivity_options,
    credential_options,
    passthrough,
)
from db_dump.pipeline.models import Arg, Command, Option, Stage
from db_dump.utilities import Utilities


class MysqldumpBuilder:
    """Builds ``mysqldump <opts> <db|--all-databases> [tables] [--ignore-table=...]``.

    Argument order is fixed: passthrough options, credentials,
    connectivity, database selector, tables to dump, tables to skip.
    """

    engine = BackupEngine.MYSQLDUMP
    extension = "sql"

    def build(
        self,
        config: BackupConfig,
        target: DumpTarget,
        utilities: Utilities,
    ) -> CommandTemplate:
        args: list[Arg] = []
        args.extend(passthrough(config.additional_options))
        args.extend(credential_options(config))
        args.extend(connectivity_options(config))
        if config.dump_all:
            args.append("--all-databases")
        else:
            args.append(config.name)
            args.extend(config.only_tables)
        args.extend(self._tables_to_skip(config))

        command = Command(
            utilities.resolve("mysqldump"),
            tuple(args),
            quiet=not config.verbose,
        )
        return CommandTemplate(
            stage=Stage(label="mysqldump", commands=(command,)),
            extension=self.extension,
        )

    def _tables_to_skip(self, config: BackupConfig) -> list[Option]:
        opts = []
        for table in config.skip_tables:
            # "db.table" is already qualified
            if not (config.dump_all or "." in table):
                table = f"{config.name}.{table}"
            opts.append(Option("--ignore-table", table))
        return opts
