"""Translatable user-facing messages.

Messages are looked up by dotted key (``state.downloading``) in the
active locale. The bundled data/messages.toml holds one table per
locale; ~/.config/deployctl/messages.toml may add locales or override
entries. A key missing from the active locale falls back to English,
then to shorter suffixes of the key, and finally to the key itself.
"""

from __future__ import annotations

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from deployctl.core.paths import get_config_dir

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


class _BlankFields(dict[str, Any]):
    """Format mapping that renders unknown fields as empty text."""

    def __missing__(self, key: str) -> str:
        return ""


def _flatten(table: dict[str, Any], prefix: str = "") -> dict[str, str]:
    messages: dict[str, str] = {}
    for key, value in table.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            messages.update(_flatten(value, f"{name}."))
        elif isinstance(value, str):
            messages[name] = value
    return messages


class MessageCatalog:
    """Messages per locale with loose key lookup."""

    def __init__(
        self, tables: dict[str, dict[str, str]] | None = None, locale: str = DEFAULT_LOCALE
    ) -> None:
        self._tables: dict[str, dict[str, str]] = {}
        for name, messages in (tables or {}).items():
            self.update(name, messages)
        self.locale = locale

    @property
    def locales(self) -> list[str]:
        return sorted(self._tables)

    def update(self, locale: str, messages: dict[str, str]) -> None:
        """Add or override messages of a locale."""
        self._tables.setdefault(locale, {}).update(messages)

    def lookup(self, key: str) -> str | None:
        """Raw message for a key, or None when no table knows it."""
        candidates = [self._tables.get(self.locale, {}), self._tables.get(DEFAULT_LOCALE, {})]
        parts = key.split(".")
        while parts:
            query = ".".join(parts)
            for table in candidates:
                if query in table:
                    return table[query]
            parts.pop(0)
        return None

    def get(self, key: str, **fields: Any) -> str:
        """Translate a key, filling ``{field}`` placeholders."""
        message = self.lookup(key)
        if message is None:
            return key
        return message.format_map(_BlankFields(fields))


def get_user_messages_path() -> Path:
    return get_config_dir() / "messages.toml"


def _load_tables(path: Path) -> dict[str, dict[str, str]]:
    """Load locale tables from a TOML file; empty when missing or invalid."""
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load messages from %s: %s", path, e)
        return {}
    return {
        locale: _flatten(table) for locale, table in data.items() if isinstance(table, dict)
    }


def load_catalog(locale: str = DEFAULT_LOCALE) -> MessageCatalog:
    """Build the catalog from the bundled and user message files."""
    bundled = resources.files("deployctl.data").joinpath("messages.toml")
    catalog = MessageCatalog(_load_tables(Path(str(bundled))), locale)
    for name, messages in _load_tables(get_user_messages_path()).items():
        catalog.update(name, messages)
    if locale not in catalog.locales:
        logger.warning("No messages for locale %s, using %s", locale, DEFAULT_LOCALE)
    return catalog


_catalog: MessageCatalog | None = None


def get_catalog() -> MessageCatalog:
    """Get the active catalog, loading it on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog


def set_locale(locale: str) -> None:
    """Switch the active locale."""
    catalog = get_catalog()
    if locale not in catalog.locales:
        logger.warning("No messages for locale %s, using %s", locale, DEFAULT_LOCALE)
    catalog.locale = locale


def translate(key: str, **fields: Any) -> str:
    return get_catalog().get(key, **fields)
