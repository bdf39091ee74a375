"""Cancellation token for workloads."""

from __future__ import annotations

import threading

from deployctl.core.errors import WorkloadAbortedError


class CancellationToken:
    """Thread-safe cancellation flag checked at workload suspension points.

    Downloads check it between chunks; orchestrators check it between
    packages and between operations.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation of the workload."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise WorkloadAbortedError if cancellation was requested."""
        if self._event.is_set():
            msg = "Workload cancelled by user"
            raise WorkloadAbortedError(msg)
