"""Workload state and result models.

The three orchestrators share one state shape; each publishes the
subset of states relevant to it through the AppContext.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from deployctl.core.errors import ErrorDetails
from deployctl.core.i18n import translate


class StateKind(str, Enum):
    """Kind of workload state.

    Attributes:
        FETCHING_REMOTE_TREE: Repository descriptor is being fetched.
        DOWNLOADING_COMPONENT: A package archive is being downloaded.
        INSTALLING_COMPONENT: A package's operations are being executed.
        REMOVING_OUTDATED_COMPONENT: An outdated package is being reverted before update.
        REMOVING_PACKAGE: A package is being uninstalled.
        INTERRUPTED: The run stopped on an unrecoverable failure.
        ABORTED: The run was cancelled by the caller.
        DONE: The run completed.
    """

    FETCHING_REMOTE_TREE = "fetching-repository"
    DOWNLOADING_COMPONENT = "downloading"
    INSTALLING_COMPONENT = "installing"
    REMOVING_OUTDATED_COMPONENT = "removing-outdated-package"
    REMOVING_PACKAGE = "removing-package"
    INTERRUPTED = "interrupted.by-error"
    ABORTED = "interrupted.by-user"
    DONE = "completed"


@dataclass(frozen=True, slots=True)
class WorkloadState:
    """A single state of a running workload.

    Attributes:
        kind: The state kind.
        subject: Package or repository name the state refers to, if any.
        error: Failure details, only set for INTERRUPTED.
    """

    kind: StateKind
    subject: str | None = None
    error: ErrorDetails | None = None

    @classmethod
    def fetching_remote_tree(cls, name: str) -> WorkloadState:
        return cls(StateKind.FETCHING_REMOTE_TREE, name)

    @classmethod
    def downloading(cls, name: str) -> WorkloadState:
        return cls(StateKind.DOWNLOADING_COMPONENT, name)

    @classmethod
    def installing(cls, name: str) -> WorkloadState:
        return cls(StateKind.INSTALLING_COMPONENT, name)

    @classmethod
    def removing_outdated(cls, name: str) -> WorkloadState:
        return cls(StateKind.REMOVING_OUTDATED_COMPONENT, name)

    @classmethod
    def removing(cls, name: str) -> WorkloadState:
        return cls(StateKind.REMOVING_PACKAGE, name)

    @classmethod
    def interrupted(cls, error: ErrorDetails) -> WorkloadState:
        return cls(StateKind.INTERRUPTED, error.message, error)

    @classmethod
    def aborted(cls) -> WorkloadState:
        return cls(StateKind.ABORTED)

    @classmethod
    def done(cls) -> WorkloadState:
        return cls(StateKind.DONE)

    @property
    def is_terminal(self) -> bool:
        """Whether no further state follows this one."""
        return self.kind in (StateKind.INTERRUPTED, StateKind.ABORTED, StateKind.DONE)

    @property
    def label(self) -> str:
        """Human-readable label in the active locale."""
        return translate(f"state.{self.kind.value}", subject=self.subject or "").rstrip()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON output."""
        result: dict[str, Any] = {"kind": self.kind.value, "label": self.label}
        if self.subject is not None:
            result["subject"] = self.subject
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass(frozen=True, slots=True)
class WorkloadResult:
    """Terminal result of a workload.

    Attributes:
        ok: True when the workload completed.
        error: Failure details when ok is False.
    """

    ok: bool
    error: ErrorDetails | None = None

    @classmethod
    def success(cls) -> WorkloadResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ErrorDetails) -> WorkloadResult:
        return cls(ok=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON output."""
        result: dict[str, Any] = {"ok": self.ok}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result
