"""Error taxonomy for deployctl.

Every failure that can end a workload derives from DeployError, which
carries a stable machine-readable name next to the human message. The
orchestrators turn these into ErrorDetails for observers instead of
forwarding raw exception objects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class ErrorDetails:
    """Structured failure description published to observers.

    Attributes:
        name: Stable error name (e.g. "content-verification").
        message: Human-readable message.
    """

    name: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON output."""
        return {"name": self.name, "message": self.message}


class DeployError(Exception):
    """Base exception for all deployment failures."""

    @property
    def error_name(self) -> str:
        """Stable kebab-case error name derived from the class name.

        Example: ``ContentVerificationError`` -> ``content-verification``.
        """
        name = type(self).__name__
        if name.endswith("Error"):
            name = name[: -len("Error")]
        return _CAMEL_BOUNDARY.sub("-", name).lower() or "deploy"

    def details(self) -> ErrorDetails:
        """Return structured details suitable for observers."""
        return ErrorDetails(name=self.error_name, message=str(self))


class TransportError(DeployError):
    """Raised when a remote resource cannot be fetched."""


class ContentVerificationError(DeployError):
    """Raised when downloaded content fails a length or hash check."""


class ArchiveError(DeployError):
    """Raised when a package archive is invalid, unsupported or encrypted."""


class FileSystemError(DeployError):
    """Raised when a filesystem mutation fails."""


class SerializationError(DeployError):
    """Raised when a descriptor or journal cannot be parsed or written."""


class OperationRecordError(SerializationError):
    """Raised when a journal record does not match its declared kind."""


class ScriptError(DeployError):
    """Raised when a lifecycle hook script fails."""


class PlatformError(DeployError):
    """Raised when a native OS integration step fails."""


class PackageNotFoundError(DeployError):
    """Raised when a package name is not present in the repository."""


class PackageAlreadyInstalledError(DeployError):
    """Raised when adding a package that already has an installation entry."""


class InstallationNotFoundError(DeployError):
    """Raised when a package has no installation entry in the summary."""


class VersionParseError(DeployError, ValueError):
    """Raised when a version string has a non-numeric segment."""


class MaintenanceJournalError(DeployError):
    """Raised when a maintenance run finds no valid journal in its directory."""


class JournalLockedError(DeployError):
    """Raised when another process holds the journal lock."""


class WorkloadAbortedError(DeployError):
    """Raised when a workload is cancelled by the caller."""


class ConfigError(DeployError):
    """Base exception for user configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""
