"""Runs pipeline stages as one interconnected OS process pipeline."""

import logging
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from db_dump.errors import DUMP_FAILED, ExecutionError
from db_dump.pipeline.models import Command, PipelineResult, Stage, StageResult
from db_dump.utilities import Utilities

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Chains a dump stage, optional transform stages and a sink write.

    Every stage is its own ``/bin/sh -c`` process; stdout of each stage
    feeds stdin of the next. ``run()`` blocks until all stages exited and
    only then inspects exit statuses, so a failing upstream stage is
    reported even when the sink write succeeds.

    Example:
        >>> orchestrator = PipelineOrchestrator(Utilities())
        >>> result = orchestrator.run(dump_stage, Path("/backups/MySQL.sql.gz"), [gzip_stage])
        >>> result.success
        True
    """

    def __init__(self, utilities: Utilities, shell: str = "/bin/sh") -> None:
        self.utilities = utilities
        self.shell = shell

    def sink_stage(self, sink_path: Path) -> Stage:
        """Terminal stage concatenating its input into ``sink_path``."""
        cat = Command(self.utilities.resolve("cat"), stdout_path=sink_path)
        return Stage(label="cat", commands=(cat,))

    def stages_for(
        self,
        dump_stage: Stage,
        sink_path: Path,
        transform_stages: Sequence[Stage] = (),
    ) -> list[Stage]:
        """Declared stage order: dump, transforms, sink."""
        return [dump_stage, *transform_stages, self.sink_stage(sink_path)]

    def run(
        self,
        dump_stage: Stage,
        sink_path: Path,
        transform_stages: Sequence[Stage] = (),
    ) -> PipelineResult:
        """Run ``dump | transforms... | cat > sink_path``.

        Args:
            dump_stage: Producer stage (possibly sudo-wrapped)
            sink_path: Artifact path written by the terminal stage
            transform_stages: Compression/encryption stages, in order

        Returns:
            PipelineResult with one StageResult per stage
        """
        return self.execute(self.stages_for(dump_stage, sink_path, transform_stages))

    def execute(self, stages: Sequence[Stage]) -> PipelineResult:
        """Start all ``stages`` connected by pipes and wait for every one.

        Raises:
            ExecutionError: If a stage process cannot be started
        """
        if not stages:
            raise ValueError("A pipeline needs at least one stage")

        processes: list[subprocess.Popen] = []
        stderr_files = []
        try:
            upstream = None
            for index, stage in enumerate(stages):
                is_last = index == len(stages) - 1
                stderr_file = tempfile.TemporaryFile()
                stderr_files.append(stderr_file)
                logger.debug("Starting stage %d/%d: %s", index + 1, len(stages), stage.label)
                try:
                    process = subprocess.Popen(
                        [self.shell, "-c", stage.render()],
                        stdin=upstream if upstream is not None else subprocess.DEVNULL,
                        stdout=subprocess.DEVNULL if is_last else subprocess.PIPE,
                        stderr=stderr_file,
                    )
                except OSError as e:
                    raise ExecutionError(
                        f"{DUMP_FAILED}\nCould not start stage '{stage.label}': {e}"
                    ) from e
                # Only the child may hold the read end, so upstream gets SIGPIPE
                if upstream is not None:
                    upstream.close()
                upstream = process.stdout
                processes.append(process)

            returncodes = [process.wait() for process in processes]
        except BaseException:
            _kill_all(processes)
            raise
        finally:
            captured = [_read_and_close(stderr_file) for stderr_file in stderr_files]

        return PipelineResult(
            stages=tuple(
                StageResult(label=stage.label, returncode=returncode, stderr=stderr)
                for stage, returncode, stderr in zip(stages, returncodes, captured)
            )
        )


def _kill_all(processes: list[subprocess.Popen]) -> None:
    for process in processes:
        if process.poll() is None:
            process.kill()
    for process in processes:
        process.wait()
        if process.stdout is not None:
            process.stdout.close()


def _read_and_close(stderr_file) -> str:
    try:
        stderr_file.seek(0)
        return stderr_file.read().decode("utf-8", errors="replace")
    finally:
        stderr_file.close()
