"""Tests for stage rendering, sudo wrapping and the pipeline orchestrator.

Orchestrator tests start real processes using only POSIX shell utilities.
"""

import signal
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from db_dump.errors import ConfigurationError, ExecutionError
from db_dump.pipeline.models import (
    Command,
    Option,
    PipelineResult,
    Raw,
    Stage,
    StageResult,
)
from db_dump.pipeline.orchestrator import PipelineOrchestrator, _kill_all
from db_dump.pipeline.privilege import wrap_with_sudo
from db_dump.pipeline.quoting import shell_quote
from db_dump.utilities import Utilities


def _sh(label: str, script: str) -> Stage:
    """Stage running ``script`` in a nested shell."""
    return Stage(label=label, commands=(Command("sh", ("-c", script)),))


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


class TestShellQuote:
    def test_single_quotes(self) -> None:
        assert shell_quote("shop.orders") == "'shop.orders'"
        assert shell_quote("it's") == "'it'\"'\"'s'"

    def test_double_quotes(self) -> None:
        assert shell_quote("/x", quote='"') == '"/x"'
        assert shell_quote('a"b$c`d\\e', quote='"') == '"a\\"b\\$c\\`d\\\\e"'

    def test_unsupported_quote(self) -> None:
        with pytest.raises(ValueError):
            shell_quote("x", quote="`")


class TestCommandRender:
    def test_plain_args_quoted_only_when_needed(self) -> None:
        command = Command("/usr/bin/tar", ("-cf", "-", "my dir"))
        assert command.render() == "/usr/bin/tar -cf - 'my dir'"

    def test_raw_is_verbatim(self) -> None:
        command = Command("mysqldump", (Raw("--where='id > 5'"),))
        assert command.render() == "mysqldump --where='id > 5'"

    def test_option_always_quoted(self) -> None:
        assert Option("--user", "bob").render() == "--user='bob'"

    def test_quiet_and_stdout_redirect(self) -> None:
        command = Command("cat", quiet=True, stdout_path=Path("/backups/My dump.sql"))
        assert command.render() == "cat 2>/dev/null > '/backups/My dump.sql'"

    def test_stage_joins_with_and(self) -> None:
        stage = Stage(label="chain", commands=(Command("true"), Command("false")))
        assert stage.render() == "true && false"


class TestWrapWithSudo:
    def test_no_user_returns_stage_unchanged(self, utilities: Utilities) -> None:
        stage = _sh("dump", "echo hi")
        assert wrap_with_sudo(stage, None, utilities) is stage
        assert wrap_with_sudo(stage, "", utilities) is stage

    def test_whole_chain_in_one_heredoc(self, utilities: Utilities) -> None:
        stage = Stage(
            label="innobackupex",
            commands=(Command("create"), Command("prepare"), Command("archive")),
        )

        wrapped = wrap_with_sudo(stage, "mysql", utilities)

        assert len(wrapped.commands) == 1
        assert wrapped.label == "innobackupex (as mysql)"
        assert wrapped.render() == (
            "/usr/bin/sudo -s -u mysql -- <<'END_OF_SUDO'\n"
            "create && prepare && archive\n"
            "END_OF_SUDO\n"
        )

    def test_user_is_quoted(self, utilities: Utilities) -> None:
        wrapped = wrap_with_sudo(_sh("dump", "true"), "my user", utilities)
        assert "-u 'my user' --" in wrapped.render()

    def test_mask_reaches_wrapped_block(self, utilities: Utilities) -> None:
        stage = Stage(
            label="mysqldump",
            commands=(Command("mysqldump", (Option("--password", "secret", secret=True),)),),
        )
        wrapped = wrap_with_sudo(stage, "mysql", utilities)

        assert "secret" in wrapped.render()
        assert "secret" not in wrapped.render(mask=True)

    def test_terminator_line_in_block_is_rejected(self, utilities: Utilities) -> None:
        stage = Stage(
            label="innobackupex",
            commands=(
                Command("innobackupex", (Raw("--note='\nEND_OF_SUDO\nrm -rf /tmp/x'"),)),
            ),
        )
        with pytest.raises(ConfigurationError, match="END_OF_SUDO"):
            wrap_with_sudo(stage, "mysql", utilities)

    def test_terminator_inside_a_line_is_allowed(self, utilities: Utilities) -> None:
        wrapped = wrap_with_sudo(_sh("dump", "echo END_OF_SUDO"), "mysql", utilities)
        assert wrapped.render().count("\nEND_OF_SUDO\n") == 1


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


class TestPipelineResult:
    def test_success_requires_every_stage(self) -> None:
        result = PipelineResult(
            stages=(StageResult("dump", 1, "boom"), StageResult("cat", 0))
        )
        assert result.success is False
        assert [stage.label for stage in result.failed_stages] == ["dump"]

    def test_error_messages_in_declared_order(self) -> None:
        result = PipelineResult(
            stages=(
                StageResult("dump", 2, "access denied\n"),
                StageResult("gzip", 0, ""),
                StageResult("cat", 1, ""),
            )
        )
        assert result.error_messages == (
            "'dump' returned exit code: 2\naccess denied\n"
            "'cat' returned exit code: 1"
        )

    def test_empty_is_success(self) -> None:
        assert PipelineResult().success is True


# ------------------------------------------------------------------
# Orchestrator (real processes)
# ------------------------------------------------------------------


class TestOrchestrator:
    def test_writes_sink(self, tmp_path: Path) -> None:
        sink = tmp_path / "MySQL.sql"
        orchestrator = PipelineOrchestrator(Utilities())
        dump = Stage(label="printf", commands=(Command("printf", ("CREATE TABLE t;\\n",)),))

        result = orchestrator.run(dump, sink)

        assert result.success is True
        assert [stage.label for stage in result.stages] == ["printf", "cat"]
        assert sink.read_text() == "CREATE TABLE t;\n"

    def test_transform_stage_between_dump_and_sink(self, tmp_path: Path) -> None:
        sink = tmp_path / "out.txt"
        orchestrator = PipelineOrchestrator(Utilities())

        result = orchestrator.run(
            _sh("dump", "printf 'abc'"),
            sink,
            [_sh("upper", "tr a-z A-Z")],
        )

        assert result.success is True
        assert [stage.label for stage in result.stages] == ["dump", "upper", "cat"]
        assert sink.read_text() == "ABC"

    def test_failed_dump_with_successful_sink_is_failure(self, tmp_path: Path) -> None:
        sink = tmp_path / "out.sql"
        orchestrator = PipelineOrchestrator(Utilities())

        result = orchestrator.run(
            _sh("mysqldump", "echo 'Access denied for user' >&2; exit 2"),
            sink,
        )

        assert result.success is False
        assert result.stages[-1].success is True
        assert result.stages[0].returncode == 2
        assert "Access denied for user" in result.error_messages
        assert sink.exists()

    def test_diagnostics_keep_declared_order(self, tmp_path: Path) -> None:
        """The slow first stage finishes last but is reported first."""
        orchestrator = PipelineOrchestrator(Utilities())

        result = orchestrator.run(
            _sh("slow", "sleep 0.3; echo slow-error >&2; exit 3"),
            tmp_path / "out",
            [_sh("fast", "echo fast-error >&2; exit 4")],
        )

        assert result.error_messages == (
            "'slow' returned exit code: 3\nslow-error\n"
            "'fast' returned exit code: 4\nfast-error"
        )

    def test_downstream_runs_after_upstream_fails(self, tmp_path: Path) -> None:
        marker = tmp_path / "downstream-ran"
        orchestrator = PipelineOrchestrator(Utilities())

        result = orchestrator.run(
            _sh("dump", "exit 1"),
            tmp_path / "out",
            [_sh("after", f"cat > /dev/null; touch '{marker}'")],
        )

        assert result.success is False
        assert marker.exists()

    def test_stage_cannot_start(self, tmp_path: Path) -> None:
        orchestrator = PipelineOrchestrator(Utilities(), shell=str(tmp_path / "no-such-shell"))

        with pytest.raises(ExecutionError, match="Could not start stage 'dump'"):
            orchestrator.execute([_sh("dump", "true")])

    def test_empty_pipeline(self) -> None:
        with pytest.raises(ValueError):
            PipelineOrchestrator(Utilities()).execute([])

    def test_interrupted_wait_kills_every_stage(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        real_wait = subprocess.Popen.wait
        interrupted: list[subprocess.Popen] = []

        def _interrupt_first_wait(self, timeout=None):
            if not interrupted:
                interrupted.append(self)
                raise KeyboardInterrupt
            return real_wait(self, timeout)

        monkeypatch.setattr(subprocess.Popen, "wait", _interrupt_first_wait)
        orchestrator = PipelineOrchestrator(Utilities())
        stages = [
            Stage(label="slow", commands=(Command("sleep", ("5",)),)),
            _sh("sink", "cat > /dev/null"),
        ]

        with pytest.raises(KeyboardInterrupt):
            orchestrator.execute(stages)

        assert interrupted[0].returncode == -signal.SIGKILL


def test_kill_all_only_kills_running() -> None:
    running = MagicMock(stdout=None)
    running.poll.return_value = None
    finished = MagicMock(stdout=None)
    finished.poll.return_value = 0

    _kill_all([running, finished])

    running.kill.assert_called_once()
    finished.kill.assert_not_called()
    running.wait.assert_called_once()
    finished.wait.assert_called_once()
