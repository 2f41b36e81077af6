"""Structured command and pipeline result models.

A ``Stage`` is one process of the OS pipeline. It is an AND-chain of
``Command`` objects that is rendered into a ``/bin/sh -c`` script by
``Stage.render()``; nothing else builds shell text.
"""

from dataclasses import dataclass, field
from pathlib import Path

from db_dump.pipeline.quoting import quote_word, shell_quote

HEREDOC_MARKER = "END_OF_SUDO"
MASK = "******"


@dataclass(frozen=True)
class Option:
    """``--flag=<value>`` with the value always quoted.

    Example:
        Option("--ignore-table", "shop.orders").render()
        # "--ignore-table='shop.orders'"
    """

    flag: str
    value: str
    quote: str = "'"
    secret: bool = False

    def render(self, mask: bool = False) -> str:
        value = MASK if (mask and self.secret) else self.value
        return f"{self.flag}={shell_quote(value, self.quote)}"


@dataclass(frozen=True)
class Raw:
    """User supplied option fragment, inserted verbatim."""

    text: str

    def render(self, mask: bool = False) -> str:
        return self.text


Arg = str | Option | Raw


def _render_arg(arg: Arg, mask: bool) -> str:
    if isinstance(arg, str):
        return quote_word(arg)
    return arg.render(mask)


@dataclass(frozen=True)
class Command:
    """A single program invocation.

    ``quiet`` sends stderr to ``/dev/null``; ``stdout_path`` redirects
    stdout into a file; ``heredoc`` feeds a nested stage on stdin.
    """

    program: str
    args: tuple[Arg, ...] = ()
    quiet: bool = False
    stdout_path: Path | None = None
    heredoc: "Stage | None" = None

    def render(self, mask: bool = False) -> str:
        parts = [quote_word(self.program)]
        parts.extend(_render_arg(arg, mask) for arg in self.args)
        parts = [part for part in parts if part]
        line = " ".join(parts)
        if self.quiet:
            line += " 2>/dev/null"
        if self.stdout_path is not None:
            line += f" > {shell_quote(str(self.stdout_path))}"
        if self.heredoc is not None:
            line += (
                f" <<'{HEREDOC_MARKER}'\n"
                f"{self.heredoc.render(mask)}\n"
                f"{HEREDOC_MARKER}\n"
            )
        return line


@dataclass(frozen=True)
class Stage:
    """One pipeline stage: commands joined by ``&&``.

    ``label`` names the stage in logs and error messages.
    """

    label: str
    commands: tuple[Command, ...]

    def render(self, mask: bool = False) -> str:
        return " && ".join(command.render(mask) for command in self.commands)


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


@dataclass(frozen=True)
class StageResult:
    """Exit status and captured stderr of one stage."""

    label: str
    returncode: int
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class PipelineResult:
    """Aggregate outcome of a pipeline, stages in declared order."""

    stages: tuple[StageResult, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        """True only if every stage exited with status 0."""
        return all(stage.success for stage in self.stages)

    @property
    def failed_stages(self) -> list[StageResult]:
        return [stage for stage in self.stages if not stage.success]

    @property
    def error_messages(self) -> str:
        """Diagnostics of every failing stage, in declared stage order."""
        chunks = []
        for stage in self.failed_stages:
            chunk = f"'{stage.label}' returned exit code: {stage.returncode}"
            stderr = stage.stderr.strip()
            if stderr:
                chunk += f"\n{stderr}"
            chunks.append(chunk)
        return "\n".join(chunks)
