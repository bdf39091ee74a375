"""Unit tests for the file and symlink operations."""

from pathlib import Path

import pytest
from deployctl.core.app import DeployApp
from deployctl.core.errors import FileSystemError
from deployctl.operations import CreateFile, CreateSymlink, Operation


class TestCreateFile:
    """Tests for CreateFile."""

    def test_creates_parents_and_content(self, app: DeployApp, tmp_path: Path) -> None:
        target = tmp_path / "etc" / "demo.conf"

        app.execute(CreateFile(target, content="key = 1\n"))

        assert target.read_text() == "key = 1\n"

    def test_empty_file_without_content(self, app: DeployApp, tmp_path: Path) -> None:
        target = tmp_path / "marker"
        app.execute(CreateFile(target))
        assert target.exists()
        assert target.read_text() == ""

    def test_content_is_not_journaled(self, app: DeployApp, tmp_path: Path) -> None:
        app.execute(CreateFile(tmp_path / "secret.txt", content="s3cret"))
        (record,) = app.summary.history
        assert "s3cret" not in record.data

    def test_unwritable_destination(self, app: DeployApp, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(FileSystemError, match="Cannot create"):
            app.execute(CreateFile(blocker / "child.txt"))
        assert not app.summary.history

    def test_revert_directory_in_place_fails(self, app: DeployApp, tmp_path: Path) -> None:
        target = tmp_path / "swapped"
        record = Operation(CreateFile(target)).execute(app)
        target.unlink()
        target.mkdir()

        with pytest.raises(FileSystemError, match="Cannot remove"):
            Operation.from_record(record).revert(app)


class TestCreateSymlink:
    """Tests for CreateSymlink."""

    def test_execute_and_revert(self, app: DeployApp, tmp_path: Path) -> None:
        original = app.install_dir / "tool"
        original.write_text("#!/bin/sh\n")
        link_dir = tmp_path / "bin"

        record = Operation(CreateSymlink(original, link_dir, "demo-tool")).execute(app)

        assert (link_dir / "demo-tool").resolve() == original.resolve()

        Operation.from_record(record).revert(app)

        assert not (link_dir / "demo-tool").is_symlink()
        assert original.exists()
        assert not app.summary.history

    def test_revert_missing_link_warns(
        self, app: DeployApp, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        CreateSymlink(tmp_path / "x", tmp_path / "bin", "gone").revert(app)
        assert "Link already removed" in caplog.text
