"""Shared plumbing for the workload commands.

Loads the product descriptor, classifies the run (fresh installer or
maintenance tool), drives a workload to completion while rendering its
progress, and maps the result to an exit code.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn

from deployctl.core.config import DeployConfig, load_config_or_default
from deployctl.core.context import ContextField, ContextSnapshot
from deployctl.core.errors import MaintenanceJournalError, SerializationError
from deployctl.core.mode import ExecutionMode, define_execution_mode, resolve_install_directory
from deployctl.core.product import ProductNotFoundError, find_product_path, load_product
from deployctl.models.workload import StateKind
from deployctl.utils.formatting import console, err_console, print_error, print_success, print_warning

if TYPE_CHECKING:
    from deployctl.core.cancel import CancellationToken
    from deployctl.models.product import Product
    from deployctl.models.workload import WorkloadResult
    from deployctl.workloads import Workload

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Route the package's log records to stderr through Rich."""
    package_logger = logging.getLogger("deployctl")
    package_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(
            RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
        )


def split_names(values: list[str] | None) -> list[str] | None:
    """Flatten repeated and comma-separated ``--packages`` values.

    Returns:
        Package names in the order given, or None when none were given.
    """
    if not values:
        return None
    names: list[str] = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names or None


@dataclass(frozen=True, slots=True)
class Session:
    """Product, configuration and execution mode of one CLI invocation."""

    product: Product
    config: DeployConfig
    mode: ExecutionMode

    @property
    def install_dir(self) -> Path:
        return resolve_install_directory(self.product, self.mode)


def open_session(ctx: typer.Context, product_path: Path | None) -> Session:
    """Load the product descriptor and detect the execution mode.

    Exits with code 1 when the descriptor is missing or invalid, or when
    the process runs from the install directory without a valid journal.
    """
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    config = obj.get("config") or load_config_or_default()

    path = find_product_path(product_path)
    try:
        product = load_product(path)
    except ProductNotFoundError as e:
        print_error(f"Product descriptor not found: {path}")
        raise typer.Exit(code=1) from e
    except SerializationError as e:
        print_error(f"Failed to load product descriptor: {e}")
        raise typer.Exit(code=1) from e

    try:
        mode = define_execution_mode(product)
    except MaintenanceJournalError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    return Session(product=product, config=config, mode=mode)


def require_installation(session: Session) -> None:
    """Exit with code 1 unless the run acts on an existing installation."""
    if session.mode is ExecutionMode.FRESH_INSTALLATION:
        print_error(f"No installation found for {session.product.display_title}.")
        raise typer.Exit(code=1)


class ProgressReporter:
    """AppContext subscriber rendering states and progress with Rich."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._task: TaskID | None = None

    def __call__(self, snapshot: ContextSnapshot, field: ContextField) -> None:
        if snapshot.state is None or field is ContextField.RESULT:
            return
        if field is ContextField.STATE:
            if self._task is not None:
                self._progress.update(self._task, completed=100)
            if snapshot.state.is_terminal:
                return
            self._task = self._progress.add_task(snapshot.state.label, total=100)
        elif self._task is not None:
            self._progress.update(self._task, completed=snapshot.progress)


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl+C into a cancellation request for the running workload."""

    def _handler(signum: int, frame: object) -> None:
        logger.info("Interrupt received, cancelling")
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not on the main thread
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run_workload(workload: Workload, silent: bool = False) -> WorkloadResult:
    """Run a workload to completion and report the outcome.

    Raises:
        typer.Exit: With code 1 when the workload was interrupted or aborted.
    """
    with _cancel_on_interrupt(workload.app.cancel):
        if silent:
            result = asyncio.run(workload.execute())
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(complete_style="progress"),
                TextColumn("{task.percentage:>3.0f}%"),
                console=console,
                transient=False,
            ) as progress:
                handle = workload.context.subscribe(ProgressReporter(progress))
                try:
                    result = asyncio.run(workload.execute())
                finally:
                    workload.context.unsubscribe(handle)

    if result.ok:
        if not silent:
            print_success(f"{workload.name.capitalize()} completed.")
        return result

    state = workload.context.state
    if state is not None and state.kind is StateKind.ABORTED:
        print_warning(f"{workload.name.capitalize()} cancelled.")
    elif result.error is not None:
        print_error(f"{workload.name.capitalize()} failed: {result.error.message}")
    raise typer.Exit(code=1)
