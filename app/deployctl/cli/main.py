"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from deployctl import __version__
from deployctl.cli.commands import check, install, status, uninstall, update
from deployctl.cli.runner import configure_logging
from deployctl.core.config import load_config_or_default
from deployctl.core.i18n import set_locale

app = typer.Typer(
    name="deployctl",
    help="Install, update and remove packaged software from a repository.",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"deployctl version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """deployctl - Deploy packaged software from a repository.

    Reads a product descriptor (product.toml), fetches the repository it
    points to and installs, updates or removes its packages, journaling
    every change so it can be reverted. Without a command, installs the
    default packages.
    """
    config = load_config_or_default()
    configure_logging("DEBUG" if verbose else config.log_level)
    set_locale(config.locale)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        install.install_packages(ctx, packages=None, silent=False, product=None)


app.add_typer(install.app, name="install")
app.add_typer(update.app, name="update")
app.add_typer(uninstall.app, name="uninstall")
app.add_typer(check.app, name="check")
app.add_typer(status.app, name="status")


if __name__ == "__main__":
    app()
