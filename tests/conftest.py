"""Shared pytest fixtures for db-dump tests."""

import stat
import textwrap
from pathlib import Path

import pytest

from db_dump.utilities import Utilities

FAKE_UTILITIES = [
    "mysqldump",
    "innobackupex",
    "xtrabackup",
    "tar",
    "cat",
    "sudo",
    "gzip",
    "bzip2",
    "age",
    "pigz",
]


@pytest.fixture
def utilities() -> Utilities:
    """Utilities resolving every known tool to ``/usr/bin/<name>``."""
    return Utilities({name: f"/usr/bin/{name}" for name in FAKE_UTILITIES})


@pytest.fixture
def fake_tool(tmp_path: Path):
    """Factory writing an executable shell script and returning its path."""

    def _make(name: str, body: str) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + textwrap.dedent(body))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
