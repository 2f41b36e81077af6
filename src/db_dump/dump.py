"""Runs one database dump end to end.

Workflow:
1. Validate checkpoint preconditions (xtrabackup only)
2. Build the engine's dump stage and base extension
3. Wrap it for ``sudo_user`` if configured
4. Splice compression and encryption stages, extending the extension
5. Run ``dump | ... | cat > <artifact>`` and wait for every stage
6. Report: raise ``ExecutionError`` or log completion

Steps 1-4 never start a process; configuration problems surface before
any work begins.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from db_dump.compression import Compressor
from db_dump.config.models import BackupConfig, BackupEngine
from db_dump.encryption import AgeEncryptor
from db_dump.engines import DumpTarget, get_builder
from db_dump.errors import DUMP_FAILED, ExecutionError
from db_dump.pipeline.models import PipelineResult, Stage
from db_dump.pipeline.orchestrator import PipelineOrchestrator
from db_dump.pipeline.privilege import wrap_with_sudo
from db_dump.utilities import Utilities
from db_dump.validation import validate_incremental

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DumpPlan:
    """Everything ``perform_dump`` will run, computed without side effects."""

    dump_stage: Stage
    transform_stages: tuple[Stage, ...]
    extension: str
    artifact_path: Path
    staging_dir: Path | None = None


@dataclass(frozen=True)
class DumpOutcome:
    artifact_path: Path
    result: PipelineResult


def plan_dump(
    config: BackupConfig,
    dump_path: Path,
    utilities: Utilities,
    compressor: Compressor | None = None,
    encryptor: AgeEncryptor | None = None,
) -> DumpPlan:
    """Validate ``config`` and synthesize the pipeline without running it.

    Raises:
        ConfigurationError: On checkpoint problems or missing utilities
    """
    validate_incremental(config)

    target = DumpTarget(dump_path=dump_path, dump_filename=config.dump_filename)
    template = get_builder(config.engine).build(config, target, utilities)
    dump_stage = wrap_with_sudo(template.stage, config.sudo_user, utilities)

    transform_stages: list[Stage] = []
    suffixes: list[str] = []

    def splice(stage: Stage, suffix: str) -> None:
        transform_stages.append(stage)
        suffixes.append(suffix)

    if compressor is not None:
        compressor.compress_with(splice)
    if encryptor is not None:
        encryptor.encrypt_with(splice)

    extension = template.extension + "".join(suffixes)
    return DumpPlan(
        dump_stage=dump_stage,
        transform_stages=tuple(transform_stages),
        extension=extension,
        artifact_path=target.artifact_path(extension),
        staging_dir=target.staging_dir if config.engine is BackupEngine.INNOBACKUPEX else None,
    )


def report_result(
    result: PipelineResult,
    dump_filename: str,
    on_finished: Callable[[], None] | None = None,
) -> None:
    """Raise on failure, otherwise log completion and notify ``on_finished``.

    Raises:
        ExecutionError: If any stage failed; message starts with ``Dump Failed!``
    """
    if not result.success:
        logger.error("%s failed in %d stage(s)", dump_filename, len(result.failed_stages))
        raise ExecutionError(f"{DUMP_FAILED}\n{result.error_messages}", result=result)

    logger.info("%s Finished!", dump_filename)
    if on_finished is not None:
        on_finished()


def perform_dump(
    config: BackupConfig,
    dump_path: Path,
    utilities: Utilities | None = None,
    compressor: Compressor | None = None,
    encryptor: AgeEncryptor | None = None,
    orchestrator: PipelineOrchestrator | None = None,
    on_finished: Callable[[], None] | None = None,
) -> DumpOutcome:
    """Dump one database into ``dump_path``.

    Args:
        config: Database configuration
        dump_path: Directory receiving the artifact (created if missing)
        utilities: Utility lookup (default: ``PATH`` only)
        compressor: Optional compression collaborator
        encryptor: Optional age encryptor, spliced after compression
        orchestrator: Pipeline runner (default: ``PipelineOrchestrator(utilities)``)
        on_finished: Called once after a successful dump

    Returns:
        DumpOutcome with the artifact path and per-stage results

    Raises:
        ConfigurationError: Before any process is started
        ExecutionError: After all stages exited, if any failed

    Example:
        >>> outcome = perform_dump(config, Path("/var/backups/mysql"), compressor=gzip)
        >>> outcome.artifact_path
        PosixPath('/var/backups/mysql/MySQL-shop.sql.gz')
    """
    utilities = utilities or Utilities()
    orchestrator = orchestrator or PipelineOrchestrator(utilities)

    logger.info("Dumping %s with %s", config.dump_filename, config.engine.value)
    plan = plan_dump(config, dump_path, utilities, compressor=compressor, encryptor=encryptor)

    dump_path.mkdir(parents=True, exist_ok=True)
    logger.info("Writing %s", plan.artifact_path)

    result = orchestrator.run(plan.dump_stage, plan.artifact_path, plan.transform_stages)
    report_result(result, config.dump_filename, on_finished=on_finished)
    return DumpOutcome(artifact_path=plan.artifact_path, result=result)
