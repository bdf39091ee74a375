"""File creation operation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from deployctl.core.errors import FileSystemError
from deployctl.models.summary import OperationKind, OperationRecord
from deployctl.operations.base import OperationPerformer, parse_payload, register

if TYPE_CHECKING:
    from deployctl.core.app import DeployApp
    from deployctl.models.package import Package

logger = logging.getLogger(__name__)


class CreateFilePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    destination: str


@register
class CreateFile(OperationPerformer):
    """Creates a file, optionally with content. Only the path is journaled."""

    KIND = OperationKind.CREATE_FILE

    def __init__(self, destination: Path, content: str | None = None) -> None:
        self.destination = destination
        self.content = content

    def execute(self, app: DeployApp) -> None:
        try:
            self.destination.parent.mkdir(parents=True, exist_ok=True)
            if self.content is None:
                self.destination.touch()
            else:
                self.destination.write_text(self.content, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"Cannot create {self.destination}: {e}") from e

    def revert(self, app: DeployApp) -> None:
        try:
            self.destination.unlink()
        except FileNotFoundError:
            logger.warning("Already removed: %s", self.destination)
        except OSError as e:
            raise FileSystemError(f"Cannot remove {self.destination}: {e}") from e

    def payload(self) -> CreateFilePayload:
        return CreateFilePayload(destination=str(self.destination))

    @classmethod
    def from_record(cls, record: OperationRecord, package: Package | None = None) -> CreateFile:
        payload = parse_payload(record, CreateFilePayload)
        return cls(Path(payload.destination))
