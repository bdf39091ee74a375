"""Check command implementation.

Compares the installed packages with the versions the repository
publishes without changing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from deployctl.api import DeployClient, UpdateCheck
from deployctl.cli.runner import open_session, split_names
from deployctl.core.errors import DeployError
from deployctl.utils.formatting import (
    console,
    create_update_table,
    format_update_row,
    print_error,
    print_info,
    print_success,
)

app = typer.Typer(
    help="Check the repository for updates.",
    invoke_without_command=True,
)


def _print_check(check: UpdateCheck) -> None:
    """Print the cross-check as a table plus the packages not installed."""
    if check.packages:
        table = create_update_table()
        for entry in check.packages:
            table.add_row(*format_update_row(entry))
        console.print(table)
    else:
        print_info("No installed packages are published by the repository.")

    if check.not_installed:
        names = ", ".join(package.name for package in check.not_installed)
        console.print(f"\n[not_installed]Available, not installed:[/] {names}")

    outdated = sum(1 for entry in check.packages if entry.outdated)
    if outdated:
        console.print(f"\n[outdated]{outdated} update(s) available.[/]")
    else:
        print_success("All installed packages are up to date.")


@app.callback(invoke_without_command=True)
def check_updates(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Option(
            "--packages",
            "-p",
            help="Packages to check (repeatable or comma-separated).",
        ),
    ] = None,
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
    """Check for updates.

    Examples:
        deployctl check                 # All published packages
        deployctl check -p core         # One package
        deployctl check --json          # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    session = open_session(ctx, product)
    client = DeployClient(session.product, config=session.config)
    try:
        check = client.check_for_updates(split_names(packages))
    except DeployError as e:
        print_error(f"Update check failed: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(check.to_dict()))
        return

    _print_check(check)
