"""Placeholder expansion for descriptors and journal text.

Descriptors may reference ``@{Key}`` placeholders such as
``@{Directories.User.Home}`` or ``@{App.TargetDirectory}``. The
formatter substitutes them before the text is parsed.
"""

from __future__ import annotations

import json
import os
import platform
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deployctl.models.product import Product

PLACEHOLDER = re.compile(r"@\{([A-Za-z0-9_.]+)\}")


def _xdg_user_dir(env_var: str, fallback: str) -> str:
    """Resolve an XDG user directory, falling back to a home subdirectory."""
    value = os.environ.get(env_var)
    if value:
        return value
    return str(Path.home() / fallback)


def json_escape(value: str) -> str:
    """Escape a value for embedding inside a JSON string literal."""
    return json.dumps(value)[1:-1]


def system_placeholders() -> dict[str, str]:
    """Placeholders describing the host system and the current user."""
    return {
        "System.Os.Name": platform.system().lower(),
        "System.Os.Version": os.environ.get("VERSION", "N/A"),
        "Directories.User.Home": str(Path.home()),
        "Directories.User.Documents": _xdg_user_dir("XDG_DOCUMENTS_DIR", "Documents"),
        "Directories.User.Downloads": _xdg_user_dir("XDG_DOWNLOAD_DIR", "Downloads"),
        "Directories.User.Desktop": _xdg_user_dir("XDG_DESKTOP_DIR", "Desktop"),
    }


class TemplateFormat:
    """Replaces ``@{Key}`` placeholders with known values.

    Unknown placeholders are left untouched so that literal ``@{...}``
    text survives a round trip.
    """

    def __init__(self, replacements: Mapping[str, str]) -> None:
        self._replacements = dict(replacements)

    @classmethod
    def for_product(cls, product: Product) -> TemplateFormat:
        """Build a formatter from system values and the product's identity."""
        replacements = system_placeholders()
        replacements.update(
            {
                "App.Name": product.name,
                "App.Publisher": product.publisher,
                "App.ProductUrl": product.product_url,
                "App.Repository": product.repository,
            }
        )
        # The target directory itself may reference user directories.
        target = cls(replacements).format(product.target_directory)
        replacements["App.TargetDirectory"] = str(Path(target).expanduser())
        return cls(replacements)

    @property
    def replacements(self) -> dict[str, str]:
        return dict(self._replacements)

    def format(self, text: str, escape: Callable[[str], str] | None = None) -> str:
        """Expand placeholders in text.

        Args:
            text: Text containing ``@{Key}`` placeholders.
            escape: Optional transformation applied to each substituted value.

        Returns:
            The expanded text.
        """

        def _substitute(match: re.Match[str]) -> str:
            value = self._replacements.get(match.group(1))
            if value is None:
                return match.group(0)
            return escape(value) if escape else value

        return PLACEHOLDER.sub(_substitute, text)

    def format_json(self, text: str) -> str:
        """Expand placeholders in JSON text, escaping each value."""
        return self.format(text, escape=json_escape)
