"""Desktop application entry operation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from deployctl.models.summary import OperationKind, OperationRecord
from deployctl.operations.base import OperationPerformer, parse_payload, register

if TYPE_CHECKING:
    from deployctl.core.app import DeployApp
    from deployctl.models.package import Package

logger = logging.getLogger(__name__)


class CreateAppEntryPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str


@register
class CreateAppEntry(OperationPerformer):
    """Registers the product's maintenance tool with the desktop."""

    KIND = OperationKind.CREATE_APP_ENTRY

    def __init__(self, name: str) -> None:
        self.name = name

    def execute(self, app: DeployApp) -> None:
        app.platform.create_app_entry(app.product, self.name, app.install_dir)

    def revert(self, app: DeployApp) -> None:
        if not app.platform.remove_app_entry(app.product, self.name):
            logger.warning("Application entry for %s already removed", app.product.name)

    def payload(self) -> CreateAppEntryPayload:
        return CreateAppEntryPayload(name=self.name)

    @classmethod
    def from_record(
        cls, record: OperationRecord, package: Package | None = None
    ) -> CreateAppEntry:
        return cls(parse_payload(record, CreateAppEntryPayload).name)
