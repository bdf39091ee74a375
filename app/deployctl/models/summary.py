"""Installation journal models.

These are the only structures written to the installation summary file.
An OperationRecord is the durable form of a reversible operation; it is
grouped into an OperationHistory scoped either to a PackageInstallation
or to the whole product.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator

if TYPE_CHECKING:
    from deployctl.models.package import Package


class OperationKind(str, Enum):
    """Closed set of reversible operation kinds.

    Attributes:
        EXTRACT_ARCHIVE: Extract a package archive into the install directory.
        CREATE_FILE: Create a file (e.g. the product descriptor).
        CREATE_SYMLINK: Create a symbolic link.
        CREATE_APP_ENTRY: Register an application entry with the desktop.
        CREATE_MAINTENANCE_TOOL: Place the maintenance tool launcher.
    """

    EXTRACT_ARCHIVE = "extract-archive"
    CREATE_FILE = "create-file"
    CREATE_SYMLINK = "create-symlink"
    CREATE_APP_ENTRY = "create-app-entry"
    CREATE_MAINTENANCE_TOOL = "create-maintenance-tool"


class OperationRecord(BaseModel):
    """Serialized form of an executed operation.

    Attributes:
        kind: Operation kind tag.
        data: Kind-specific payload serialized as JSON text.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Annotated[OperationKind, Field(description="Operation kind tag")]
    data: Annotated[str, Field(description="Serialized performer payload")]


class OperationHistory(RootModel[list[OperationRecord]]):
    """Ordered journal of executed operations."""

    root: list[OperationRecord] = []

    def __iter__(self) -> Iterator[OperationRecord]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __bool__(self) -> bool:
        return bool(self.root)

    def add(self, record: OperationRecord) -> None:
        """Append a record in execution order."""
        self.root.append(record)

    def remove(self, record: OperationRecord) -> bool:
        """Remove a specific record.

        The identical object is preferred; otherwise the first equal record
        is removed.

        Returns:
            True if a record was removed.
        """
        for index, existing in enumerate(self.root):
            if existing is record:
                del self.root[index]
                return True
        for index, existing in enumerate(self.root):
            if existing == record:
                del self.root[index]
                return True
        return False

    def reversed(self) -> list[OperationRecord]:
        """Snapshot of the records, most recent first."""
        return list(reversed(self.root))


def _now() -> datetime:
    return datetime.now(UTC)


class PackageInstallation(BaseModel):
    """Local record of an installed package.

    Attributes:
        name: Package name.
        display_name: Human-readable name.
        version: Installed version.
        installed_at: First installation time (UTC).
        updated_at: Last install or update time (UTC).
        default: Whether the package is a default package.
        completed: Whether the last install or update of the package finished.
        history: Operations executed for this package.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Package name")]
    display_name: Annotated[str, Field(description="Human-readable name")] = ""
    version: Annotated[str, Field(description="Installed version")]
    installed_at: Annotated[datetime, Field(description="Installation time")]
    updated_at: Annotated[datetime, Field(description="Last update time")]
    default: Annotated[bool, Field(description="Default package")] = False
    completed: Annotated[bool, Field(description="Install or update finished")] = True
    history: Annotated[OperationHistory, Field(description="Package operations")] = Field(
        default_factory=OperationHistory
    )

    @classmethod
    def from_package(cls, package: Package) -> PackageInstallation:
        """Create a fresh installation entry for a package."""
        now = _now()
        return cls(
            name=package.name,
            display_name=package.display_name,
            version=package.version,
            installed_at=now,
            updated_at=now,
            default=package.default,
            completed=False,
        )

    def mark_updated(self, package: Package) -> None:
        """Record that the package was replaced by a newer release."""
        self.version = package.version
        self.display_name = package.display_name
        self.updated_at = _now()


class SummaryData(BaseModel):
    """Root payload of the installation summary file.

    Attributes:
        application_name: Product name the summary belongs to.
        packages: Installed packages in installation order.
        history: Product-level operations not scoped to a package.
    """

    model_config = ConfigDict(extra="forbid")

    application_name: Annotated[str, Field(description="Product name")]
    packages: Annotated[list[PackageInstallation], Field(description="Installed packages")] = []
    history: Annotated[OperationHistory, Field(description="Global operations")] = Field(
        default_factory=OperationHistory
    )

    @model_validator(mode="after")
    def validate_unique_names(self) -> SummaryData:
        """Ensure installed package names are unique."""
        names = [package.name for package in self.packages]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            msg = f"Duplicate installed package(s): {', '.join(duplicates)}"
            raise ValueError(msg)
        return self
