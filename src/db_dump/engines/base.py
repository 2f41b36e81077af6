"""Shared pieces of the engine command builders.

Each engine implements the ``EngineBuilder`` Protocol and returns a
``CommandTemplate``: one pipeline stage (an AND-chain of commands) plus
the artifact's base extension.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.pipeline.models import Command, Option, Raw, Stage
from db_dump.utilities import Utilities


@dataclass(frozen=True)
class DumpTarget:
    """Where a run writes: ``<dump_path>/<dump_filename>.<ext>``."""

    dump_path: Path
    dump_filename: str

    @property
    def staging_dir(self) -> Path:
        """Working directory for innobackupex, scoped to one run."""
        return self.dump_path / f"{self.dump_filename}.bkpdir"

    def artifact_path(self, extension: str) -> Path:
        return self.dump_path / f"{self.dump_filename}.{extension}"


@dataclass(frozen=True)
class CommandTemplate:
    """Result of ``EngineBuilder.build()``."""

    stage: Stage
    extension: str

    @property
    def commands(self) -> tuple[Command, ...]:
        return self.stage.commands


class EngineBuilder(Protocol):
    """Command synthesis for one backup engine."""

    engine: BackupEngine

    def build(
        self,
        config: BackupConfig,
        target: DumpTarget,
        utilities: Utilities,
    ) -> CommandTemplate:
        """Build the dump stage for ``config``.

        Must be pure: the same inputs always yield an equal template.
        """
        ...


# ------------------------------------------------------------------
# Option helpers
# ------------------------------------------------------------------


def credential_options(config: BackupConfig) -> list[Option]:
    opts = []
    if config.username:
        opts.append(Option("--user", config.username))
    if config.password:
        opts.append(Option("--password", config.password, secret=True))
    return opts


def connectivity_options(config: BackupConfig) -> list[Option]:
    if config.socket:
        return [Option("--socket", config.socket)]

    opts = []
    if config.host:
        opts.append(Option("--host", config.host))
    if config.port:
        opts.append(Option("--port", str(config.port)))
    return opts


def passthrough(fragments: tuple[str, ...]) -> list[Raw]:
    return [Raw(fragment) for fragment in fragments if fragment]
