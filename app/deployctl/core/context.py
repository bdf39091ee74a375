"""Progress and result broadcast for a running workload.

An AppContext is created per run and owns its subscriber list. Every
mutation notifies all subscribers synchronously with a snapshot of the
context and the field that changed; a slow subscriber therefore slows
the workload down. A subscriber that raises is logged and skipped; it
never interrupts the workload or the other subscribers.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from deployctl.models.workload import StateKind, WorkloadResult, WorkloadState

if TYPE_CHECKING:
    from deployctl.core.summary import InstallationSummary

logger = logging.getLogger(__name__)


class ContextField(str, Enum):
    """Field of the context that changed."""

    STATE = "state"
    PROGRESS = "progress"
    RESULT = "result"


@dataclass(frozen=True, slots=True)
class ContextSnapshot:
    """Immutable view of an AppContext.

    Attributes:
        state: Current workload state, if any.
        progress: Progress of the current state, 0.0-100.0.
        result: Terminal result, once set.
    """

    state: WorkloadState | None
    progress: float
    result: WorkloadResult | None

    @property
    def label(self) -> str | None:
        return self.state.label if self.state else None

    @property
    def is_completed(self) -> bool:
        return self.state is not None and self.state.kind is StateKind.DONE

    @property
    def is_error(self) -> bool:
        return self.result is not None and not self.result.ok


Subscriber = Callable[[ContextSnapshot, ContextField], None]


@dataclass(frozen=True, slots=True)
class SubscriptionHandle:
    """Opaque handle returned by AppContext.subscribe."""

    id: int


class AppContext:
    """Live state of one workload run, observable by subscribers."""

    def __init__(self, summary: InstallationSummary | None = None) -> None:
        self.summary = summary
        self._lock = threading.Lock()
        self._state: WorkloadState | None = None
        self._progress = 0.0
        self._result: WorkloadResult | None = None
        self._subscribers: dict[int, Subscriber] = {}
        self._ids = itertools.count(1)

    @property
    def state(self) -> WorkloadState | None:
        return self._state

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def result(self) -> WorkloadResult | None:
        return self._result

    def snapshot(self) -> ContextSnapshot:
        with self._lock:
            return self._snapshot()

    def subscribe(self, callback: Subscriber) -> SubscriptionHandle:
        """Register a subscriber for every subsequent change."""
        with self._lock:
            handle = SubscriptionHandle(next(self._ids))
            self._subscribers[handle.id] = callback
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> bool:
        """Remove a subscriber.

        Returns:
            True if the handle belonged to this context and was active.
        """
        with self._lock:
            return self._subscribers.pop(handle.id, None) is not None

    def set_state(self, state: WorkloadState) -> None:
        """Publish a new state and reset progress to zero."""
        with self._lock:
            self._state = state
            self._progress = 0.0
            snapshot = self._snapshot()
            subscribers = list(self._subscribers.values())
        logger.debug("State: %s", state.label)
        self._notify(subscribers, snapshot, ContextField.STATE)

    def set_progress(self, progress: float) -> None:
        """Publish progress of the current state, clamped to 0-100."""
        value = min(max(float(progress), 0.0), 100.0)
        with self._lock:
            self._progress = value
            snapshot = self._snapshot()
            subscribers = list(self._subscribers.values())
        self._notify(subscribers, snapshot, ContextField.PROGRESS)

    def set_result(self, result: WorkloadResult) -> None:
        """Publish the terminal result."""
        with self._lock:
            self._result = result
            snapshot = self._snapshot()
            subscribers = list(self._subscribers.values())
        self._notify(subscribers, snapshot, ContextField.RESULT)

    def _snapshot(self) -> ContextSnapshot:
        return ContextSnapshot(state=self._state, progress=self._progress, result=self._result)

    @staticmethod
    def _notify(
        subscribers: list[Subscriber], snapshot: ContextSnapshot, changed: ContextField
    ) -> None:
        for callback in subscribers:
            try:
                callback(snapshot, changed)
            except Exception:
                logger.exception("Subscriber %r failed on %s change", callback, changed.value)
