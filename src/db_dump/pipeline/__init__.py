"""Pipeline stages, privilege wrapping and the process orchestrator.

Usage:
    from db_dump.pipeline import PipelineOrchestrator, Stage, Command, Option
"""

from db_dump.pipeline.models import (
    Command,
    Option,
    PipelineResult,
    Raw,
    Stage,
    StageResult,
)
from db_dump.pipeline.orchestrator import PipelineOrchestrator
from db_dump.pipeline.privilege import wrap_with_sudo

__all__ = [
    "Command",
    "Option",
    "PipelineResult",
    "Raw",
    "Stage",
    "StageResult",
    "PipelineOrchestrator",
    "wrap_with_sudo",
]
