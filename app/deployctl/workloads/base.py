"""Workload runner and concurrency gate.

A Workload is one end-to-end install, update or uninstall run. Its
``execute`` method holds the journal lock for the whole run, drives the
state machine through the AppContext and always ends with a terminal
state and result:

- Done and an ok result when ``run`` returns,
- Aborted when the cancellation token fires,
- Interrupted with error details on any DeployError or OSError, and
  with an "internal" error for anything unexpected.

Only one workload may run per WorkloadGate; a request arriving while a
RunHandle is checked out is rejected instead of queued.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, MutableMapping
from typing import TYPE_CHECKING

from deployctl.core.app import DeployApp
from deployctl.core.cancel import CancellationToken
from deployctl.core.context import AppContext
from deployctl.core.errors import (
    DeployError,
    ErrorDetails,
    FileSystemError,
    WorkloadAbortedError,
)
from deployctl.core.lock import JournalLock
from deployctl.models.workload import WorkloadResult, WorkloadState

if TYPE_CHECKING:
    from deployctl.core.config import DeployConfig
    from deployctl.integration import PlatformIntegration
    from deployctl.models.product import Product
    from deployctl.transport import Transport

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "internal"


class RunHandle:
    """Proof that the caller owns the gate for one run.

    Releasing the handle (or leaving its ``with`` block) reopens the gate.

    Attributes:
        cancel: Token cancelling the run started under this handle.
    """

    def __init__(self, gate: WorkloadGate) -> None:
        self._gate = gate
        self.cancel = CancellationToken()
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._gate._release(self)

    def __enter__(self) -> RunHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class WorkloadGate:
    """Admits at most one active workload at a time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: RunHandle | None = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._active is not None

    def checkout(self) -> RunHandle | None:
        """Check out the run handle.

        Returns:
            A new RunHandle, or None when a workload is already active.
        """
        with self._lock:
            if self._active is not None:
                return None
            self._active = RunHandle(self)
            return self._active

    def cancel_active(self) -> bool:
        """Cancel the active workload, if any."""
        with self._lock:
            handle = self._active
        if handle is None:
            return False
        handle.cancel.cancel()
        return True

    def _release(self, handle: RunHandle) -> None:
        with self._lock:
            if self._active is handle:
                self._active = None


class Workload(ABC):
    """Base class for the install, update and uninstall orchestrators.

    Attributes:
        app: Application state for this run.
        packages: Explicit package subset, or None for the default set.
    """

    name: str = "workload"

    def __init__(
        self,
        product: Product,
        packages: Iterable[str] | None = None,
        *,
        context: AppContext | None = None,
        transport: Transport | None = None,
        platform: PlatformIntegration | None = None,
        config: DeployConfig | None = None,
        cancel: CancellationToken | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.packages: list[str] | None = list(packages) if packages is not None else None
        self.app = DeployApp.create(
            product,
            environ=environ,
            context=context,
            transport=transport,
            platform=platform,
            config=config,
            cancel=cancel,
        )

    @property
    def context(self) -> AppContext:
        return self.app.context

    @abstractmethod
    async def run(self) -> None:
        """Sequence the workload. Raise DeployError to interrupt."""

    async def finalize(self, completed: bool) -> None:
        """Persist the journal once the run ends, successful or not."""
        self.app.persist_summary()

    async def execute(self) -> WorkloadResult:
        """Run the workload and publish its terminal state and result."""
        app = self.app
        lock = JournalLock(app.summary_path)
        details: ErrorDetails | None = None
        aborted = False
        loaded = False
        logger.info("Starting %s in %s", self.name, app.install_dir)
        try:
            try:
                lock.acquire()
                app.load_summary()
                loaded = True
                app.terminate_running()
                await self.run()
            except WorkloadAbortedError as e:
                aborted = True
                details = e.details()
            except DeployError as e:
                details = e.details()
            except OSError as e:
                details = FileSystemError(str(e)).details()
            except Exception as e:
                logger.exception("Unexpected failure during %s", self.name)
                details = ErrorDetails(name=INTERNAL_ERROR, message=f"{type(e).__name__}: {e}")

            if loaded:
                try:
                    await self.finalize(details is None)
                except (DeployError, OSError) as e:
                    logger.error("Failed to finalize %s: %s", self.name, e)
                    if details is None:
                        details = (
                            e.details()
                            if isinstance(e, DeployError)
                            else FileSystemError(str(e)).details()
                        )
        finally:
            lock.release()

        if details is None:
            app.set_state(WorkloadState.done())
            app.set_progress(100.0)
            result = WorkloadResult.success()
            logger.info("%s completed", self.name.capitalize())
        elif aborted:
            app.set_state(WorkloadState.aborted())
            result = WorkloadResult.failure(details)
            logger.warning("%s aborted", self.name.capitalize())
        else:
            app.set_state(WorkloadState.interrupted(details))
            result = WorkloadResult.failure(details)
            logger.error("%s interrupted: %s", self.name.capitalize(), details.message)
        app.context.set_result(result)
        return result
