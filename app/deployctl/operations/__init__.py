"""Reversible operations.

Importing this package registers every performer.
"""

from deployctl.operations.appentry import CreateAppEntry
from deployctl.operations.archive import ExtractArchive
from deployctl.operations.base import PERFORMERS, Operation, OperationPerformer, parse_payload
from deployctl.operations.files import CreateFile
from deployctl.operations.maintenance import MAINTENANCE_TOOL_NAME, CreateMaintenanceTool
from deployctl.operations.symlink import CreateSymlink

__all__ = [
    "MAINTENANCE_TOOL_NAME",
    "PERFORMERS",
    "CreateAppEntry",
    "CreateFile",
    "CreateMaintenanceTool",
    "CreateSymlink",
    "ExtractArchive",
    "Operation",
    "OperationPerformer",
    "parse_payload",
]
