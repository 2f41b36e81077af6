"""Engine command builders, one per ``BackupEngine``.

Usage:
    >>> from db_dump.engines import get_builder
    >>> template = get_builder(config.engine).build(config, target, utilities)
    >>> template.extension
    'sql'
"""

from db_dump.config.models import BackupEngine
from db_dump.engines.base import CommandTemplate, DumpTarget, EngineBuilder
from db_dump.engines.innobackupex import InnobackupexBuilder
from db_dump.engines.mysqldump import MysqldumpBuilder
from db_dump.engines.xtrabackup import XtrabackupBuilder

BUILDERS: dict[BackupEngine, EngineBuilder] = {
    BackupEngine.MYSQLDUMP: MysqldumpBuilder(),
    BackupEngine.INNOBACKUPEX: InnobackupexBuilder(),
    BackupEngine.XTRABACKUP: XtrabackupBuilder(),
}


def get_builder(engine: BackupEngine) -> EngineBuilder:
    """Return the builder registered for ``engine``."""
    return BUILDERS[engine]


__all__ = [
    "BUILDERS",
    "CommandTemplate",
    "DumpTarget",
    "EngineBuilder",
    "InnobackupexBuilder",
    "MysqldumpBuilder",
    "XtrabackupBuilder",
    "get_builder",
]
