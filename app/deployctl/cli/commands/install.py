"""Install command implementation.

Installs the repository's default packages, or an explicit subset, into
the product's target directory (fresh install) or the running install
directory (maintenance tool).
"""

from pathlib import Path
from typing import Annotated

import typer

from deployctl.cli.runner import open_session, run_workload, split_names
from deployctl.workloads import Installer

app = typer.Typer(
    help="Install packages from the repository.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def install_packages(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--packages",
            "-p",
            help="Packages to install (repeatable or comma-separated). Defaults to the default set.",
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
    """Install packages.

    Packages that are already installed are skipped; use 'update' to
    move them to a newer version.

    Examples:
        deployctl install                         # Default packages
        deployctl install -p core -p docs         # Explicit packages
        deployctl install --packages core,docs    # Same, comma-separated
    """
    if ctx.invoked_subcommand is not None:
        return

    session = open_session(ctx, product)
    workload = Installer(session.product, split_names(packages), config=session.config)
    run_workload(workload, silent=silent)
