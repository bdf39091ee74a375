"""Uninstall command implementation.

Reverts the journaled operations of installed packages, in reverse
order, and drops them from the installation summary.
"""

from pathlib import Path
from typing import Annotated

import typer

from deployctl.cli.runner import open_session, require_installation, run_workload, split_names
from deployctl.workloads import Uninstaller

app = typer.Typer(
    help="Remove installed packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def uninstall_packages(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--packages",
            "-p",
            help="Packages to remove (repeatable or comma-separated). Defaults to all installed.",
        ),
    ] = None,
    silent: Annotated[
        bool,
        typer.Option(
            "--silent",
            "-s",
            help="Do not render progress.",
        ),
    ] = False,
    product: Annotated[
        Path | None,
        typer.Option(
            "--product",
            help="Path to the product descriptor (default: ./product.toml).",
        ),
    ] = None,
) -> None:
    """Remove installed packages.

    Removing every package also removes the maintenance tool and the
    product files the installer created.

    Examples:
        deployctl uninstall                 # Remove everything
        deployctl uninstall -p docs         # Remove one package
    """
    if ctx.invoked_subcommand is not None:
        return

    session = open_session(ctx, product)
    require_installation(session)
    workload = Uninstaller(session.product, split_names(packages), config=session.config)
    run_workload(workload, silent=silent)
