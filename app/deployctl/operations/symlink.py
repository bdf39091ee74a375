"""Symbolic link operation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from deployctl.models.summary import OperationKind, OperationRecord
from deployctl.operations.base import OperationPerformer, parse_payload, register

if TYPE_CHECKING:
    from deployctl.core.app import DeployApp
    from deployctl.models.package import Package

logger = logging.getLogger(__name__)


class CreateSymlinkPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    original: str
    destination: str
    link_name: str


@register
class CreateSymlink(OperationPerformer):
    """Creates ``destination/link_name`` pointing at original."""

    KIND = OperationKind.CREATE_SYMLINK

    def __init__(self, original: Path, destination: Path, link_name: str) -> None:
        self.original = original
        self.destination = destination
        self.link_name = link_name

    def execute(self, app: DeployApp) -> None:
        app.platform.create_symlink(self.original, self.destination, self.link_name)

    def revert(self, app: DeployApp) -> None:
        if not app.platform.remove_symlink(self.destination, self.link_name):
            logger.warning("Link already removed: %s", self.destination / self.link_name)

    def payload(self) -> CreateSymlinkPayload:
        return CreateSymlinkPayload(
            original=str(self.original),
            destination=str(self.destination),
            link_name=self.link_name,
        )

    @classmethod
    def from_record(
        cls, record: OperationRecord, package: Package | None = None
    ) -> CreateSymlink:
        payload = parse_payload(record, CreateSymlinkPayload)
        return cls(Path(payload.original), Path(payload.destination), payload.link_name)
