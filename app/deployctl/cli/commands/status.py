"""Status command implementation.

Shows what the installation summary records for the current install.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from deployctl.cli.runner import open_session
from deployctl.core.errors import SerializationError
from deployctl.core.paths import get_summary_path
from deployctl.core.summary import InstallationSummary
from deployctl.utils.formatting import (
    console,
    create_installation_table,
    format_installation_row,
    print_error,
    print_info,
)

app = typer.Typer(
    help="Show installed packages.",
    invoke_without_command=True,
)


def _status_dict(summary: InstallationSummary, install_dir: Path) -> dict[str, Any]:
    return {
        "application_name": summary.application_name,
        "install_dir": str(install_dir),
        "operations": len(summary.history),
        "packages": [
            {
                "name": installation.name,
                "display_name": installation.display_name,
                "version": installation.version,
                "installed_at": installation.installed_at.isoformat(),
                "updated_at": installation.updated_at.isoformat(),
                "operations": len(installation.history),
                "completed": installation.completed,
            }
            for installation in summary.packages
        ],
    }


@app.callback(invoke_without_command=True)
def show_status(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
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
    """Show installed packages.

    Examples:
        deployctl status             # Table of installed packages
        deployctl status --json      # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    session = open_session(ctx, product)
    install_dir = session.install_dir
    summary_path = get_summary_path(install_dir)
    if not summary_path.exists():
        print_info(f"No installation found in {install_dir}.")
        return

    try:
        summary = InstallationSummary.load(summary_path, session.product.create_formatter())
    except SerializationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(_status_dict(summary, install_dir)))
        return

    if summary.is_empty:
        print_info(f"No packages installed in {install_dir}.")
        return

    table = create_installation_table(f"{session.product.display_title} ({install_dir})")
    for installation in summary.packages:
        table.add_row(*format_installation_row(installation))
    console.print(table)
