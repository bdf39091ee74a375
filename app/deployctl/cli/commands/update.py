"""Update command implementation.

Cross-checks the installed packages against the repository and moves
the outdated ones to the published version.
"""

from pathlib import Path
from typing import Annotated

import typer

from deployctl.cli.runner import open_session, require_installation, run_workload, split_names
from deployctl.workloads import Updater

app = typer.Typer(
    help="Update installed packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def update_packages(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--packages",
            "-p",
            help="Packages to update (repeatable or comma-separated). Defaults to all installed.",
        ),
    ] = None,
    reinstall: Annotated[
        bool,
        typer.Option(
            "--reinstall",
            help="Also reinstall packages whose version did not change.",
        ),
    ] = False,
    allow_downgrade: Annotated[
        bool,
        typer.Option(
            "--allow-downgrade",
            help="Also apply versions older than the installed ones.",
        ),
    ] = False,
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
    """Update installed packages.

    Only packages with a strictly newer published version are updated
    unless --reinstall or --allow-downgrade is given.

    Examples:
        deployctl update                    # Update everything outdated
        deployctl update -p core            # Update one package
        deployctl update --reinstall        # Reinstall current versions too
    """
    if ctx.invoked_subcommand is not None:
        return

    session = open_session(ctx, product)
    require_installation(session)
    workload = Updater(
        session.product,
        split_names(packages),
        reinstall=reinstall,
        allow_downgrade=allow_downgrade,
        config=session.config,
    )
    run_workload(workload, silent=silent)
