"""Data models for deployctl."""

from deployctl.models.package import Package, Repository
from deployctl.models.product import Product
from deployctl.models.summary import (
    OperationHistory,
    OperationKind,
    OperationRecord,
    PackageInstallation,
    SummaryData,
)
from deployctl.models.workload import (
    ErrorDetails,
    StateKind,
    WorkloadResult,
    WorkloadState,
)

__all__ = [
    "ErrorDetails",
    "OperationHistory",
    "OperationKind",
    "OperationRecord",
    "Package",
    "PackageInstallation",
    "Product",
    "Repository",
    "StateKind",
    "SummaryData",
    "WorkloadResult",
    "WorkloadState",
]
