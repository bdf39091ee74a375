"""Archive extraction operation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from deployctl.core.errors import ArchiveError, FileSystemError, OperationRecordError
from deployctl.models.summary import OperationKind, OperationRecord
from deployctl.operations.base import OperationPerformer, parse_payload, register
from deployctl.utils.archive import extract_zip

if TYPE_CHECKING:
    from deployctl.core.app import DeployApp
    from deployctl.models.package import Package

logger = logging.getLogger(__name__)


class ExtractArchivePayload(BaseModel):
    """Journal payload: extracted paths relative to the destination."""

    model_config = ConfigDict(extra="forbid")

    destination: str
    files: list[str] = []
    directories: list[str] = []


@register
class ExtractArchive(OperationPerformer):
    """Extracts a package archive into the install directory.

    Every extracted file is recorded so the extraction can be reverted
    file by file, newest first.
    """

    KIND = OperationKind.EXTRACT_ARCHIVE

    def __init__(
        self,
        package: Package,
        destination: Path,
        archive: Path | None = None,
        files: list[str] | None = None,
        directories: list[str] | None = None,
    ) -> None:
        self.package = package
        self.destination = destination
        self.archive = archive
        self.files: list[str] = list(files or [])
        self.directories: list[str] = list(directories or [])

    def execute(self, app: DeployApp) -> None:
        if self.archive is None:
            msg = f"No archive to extract for package {self.package.name}"
            raise ArchiveError(msg)
        logger.info("Extracting %s into %s", self.package.display_name, self.destination)
        self.files.clear()
        self.directories.clear()
        result = extract_zip(
            self.archive,
            self.destination,
            progress=app.set_progress,
            on_file=self.files.append,
        )
        self.directories = result.directories

    def revert(self, app: DeployApp) -> None:
        failures: list[str] = []
        for relative in reversed(self.files):
            path = self.destination / relative
            try:
                path.unlink()
            except FileNotFoundError:
                logger.warning("Already removed: %s", path)
            except OSError as e:
                logger.error("Cannot remove %s: %s", path, e)
                failures.append(relative)
            else:
                logger.debug("Removed %s", path)

        for relative in reversed(self.directories):
            path = self.destination / relative
            try:
                path.rmdir()
            except OSError as e:
                logger.debug("Keeping directory %s: %s", path, e)

        if failures:
            msg = (
                f"Could not remove {len(failures)} file(s) of package "
                f"{self.package.name}: {', '.join(failures)}"
            )
            raise FileSystemError(msg)

    def payload(self) -> ExtractArchivePayload:
        return ExtractArchivePayload(
            destination=str(self.destination),
            files=list(self.files),
            directories=list(self.directories),
        )

    @classmethod
    def from_record(
        cls, record: OperationRecord, package: Package | None = None
    ) -> ExtractArchive:
        payload = parse_payload(record, ExtractArchivePayload)
        if package is None:
            msg = "Extract archive records need their owning package"
            raise OperationRecordError(msg)
        return cls(
            package,
            Path(payload.destination),
            files=payload.files,
            directories=payload.directories,
        )
