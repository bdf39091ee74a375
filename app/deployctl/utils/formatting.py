"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from deployctl.core.theme import get_theme

if TYPE_CHECKING:
    from deployctl.api import PackageVersioning
    from deployctl.models.summary import PackageInstallation


def _detect_color_system() -> str | None:
    """Return "truecolor" for interactive terminals, None to let Rich auto-detect."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_installation_table(title: str = "Installed Packages") -> Table:
    """Create a table for installed packages."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Package", style="package.name", no_wrap=True)
    table.add_column("Name", style="text")
    table.add_column("Version", style="package.version")
    table.add_column("Updated", style="muted")
    table.add_column("Operations", style="info", justify="right")
    return table


def format_installation_row(installation: PackageInstallation) -> tuple[str, str, str, str, str]:
    """Format an installation entry as a table row."""
    return (
        installation.name,
        installation.display_name or "-",
        installation.version,
        installation.updated_at.strftime("%Y-%m-%d %H:%M"),
        str(len(installation.history)),
    )


def create_update_table(title: str = "Available Updates") -> Table:
    """Create a table for the cross-check result."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Package", style="package.name", no_wrap=True)
    table.add_column("Installed", style="package.version")
    table.add_column("Latest", style="text")
    return table


def format_update_row(entry: PackageVersioning) -> tuple[str, str, str, str]:
    """Format an installed package and its published version as a table row."""
    if entry.outdated:
        icon = "[outdated]↑[/]"
        latest = f"[outdated]{entry.latest_version}[/]"
    else:
        icon = "[current]✓[/]"
        latest = f"[current]{entry.latest_version}[/]"
    return (icon, entry.name, entry.installed_version, latest)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
