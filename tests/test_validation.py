"""Tests for validate_incremental() checkpoint preconditions."""

from pathlib import Path

import pytest

from db_dump.config.models import BackupConfig
from db_dump.errors import (
    ConfigurationError,
    MissingCheckpointDirError,
    MissingCheckpointError,
)
from db_dump.validation import CHECKPOINT_MARKER, validate_incremental


class TestIncremental:
    def test_missing_checkpoint_dir(self) -> None:
        config = BackupConfig(engine="xtrabackup", incremental=True)
        with pytest.raises(MissingCheckpointDirError):
            validate_incremental(config)

    def test_missing_marker(self, tmp_path: Path) -> None:
        """Message names the directory and hints at a prior full backup."""
        config = BackupConfig(engine="xtrabackup", incremental=True, checkpoint_dir=tmp_path)
        with pytest.raises(MissingCheckpointError) as excinfo:
            validate_incremental(config)

        message = str(excinfo.value)
        assert str(tmp_path) in message
        assert "full backup" in message

    def test_marker_present(self, tmp_path: Path) -> None:
        (tmp_path / CHECKPOINT_MARKER).write_text("backup_type = full-backuped\n")
        config = BackupConfig(engine="xtrabackup", incremental=True, checkpoint_dir=tmp_path)
        validate_incremental(config)

    def test_marker_is_not_written(self, tmp_path: Path) -> None:
        config = BackupConfig(engine="xtrabackup", checkpoint_dir=tmp_path)
        validate_incremental(config)
        assert list(tmp_path.iterdir()) == []


class TestFullWithCheckpointDir:
    def test_directory_must_exist(self, tmp_path: Path) -> None:
        missing = tmp_path / "lsn"
        config = BackupConfig(engine="xtrabackup", checkpoint_dir=missing)
        with pytest.raises(MissingCheckpointDirError, match=str(missing)):
            validate_incremental(config)

    def test_file_is_not_a_directory(self, tmp_path: Path) -> None:
        not_a_dir = tmp_path / "lsn"
        not_a_dir.write_text("")
        config = BackupConfig(engine="xtrabackup", checkpoint_dir=not_a_dir)
        with pytest.raises(MissingCheckpointDirError):
            validate_incremental(config)

    def test_existing_directory(self, tmp_path: Path) -> None:
        validate_incremental(BackupConfig(engine="xtrabackup", checkpoint_dir=tmp_path))

    def test_no_checkpoint_dir(self) -> None:
        validate_incremental(BackupConfig(engine="xtrabackup"))


class TestOtherEngines:
    @pytest.mark.parametrize("engine", ["mysqldump", "innobackupex"])
    def test_skipped(self, engine: str, tmp_path: Path) -> None:
        """checkpoint_dir is not inspected for other engines."""
        config = BackupConfig(engine=engine, checkpoint_dir=tmp_path / "missing")
        validate_incremental(config)


def test_errors_are_configuration_errors() -> None:
    assert issubclass(MissingCheckpointDirError, ConfigurationError)
    assert issubclass(MissingCheckpointError, ConfigurationError)
