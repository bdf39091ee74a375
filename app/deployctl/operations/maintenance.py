"""Maintenance tool placement operation."""

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

MAINTENANCE_TOOL_NAME = "maintenancetool"


class CreateMaintenanceToolPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str


@register
class CreateMaintenanceTool(OperationPerformer):
    """Places the maintenance tool launcher into the install directory."""

    KIND = OperationKind.CREATE_MAINTENANCE_TOOL

    def __init__(self, name: str = MAINTENANCE_TOOL_NAME) -> None:
        self.name = name

    def execute(self, app: DeployApp) -> None:
        app.platform.create_maintenance_tool(app.product, app.install_dir, self.name)

    def revert(self, app: DeployApp) -> None:
        if not app.platform.remove_maintenance_tool(app.install_dir, self.name):
            logger.warning("Maintenance tool %s already removed", self.name)

    def payload(self) -> CreateMaintenanceToolPayload:
        return CreateMaintenanceToolPayload(name=self.name)

    @classmethod
    def from_record(
        cls, record: OperationRecord, package: Package | None = None
    ) -> CreateMaintenanceTool:
        return cls(parse_payload(record, CreateMaintenanceToolPayload).name)
