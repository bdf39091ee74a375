"""Key/value store available to hook scripts.

Values are kept per product in a TOML file under the user config
directory, so scripts can remember choices between runs.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w

from deployctl.core.errors import ScriptError
from deployctl.core.paths import get_script_store_path

logger = logging.getLogger(__name__)

ScalarValue = str | int | float | bool


class ScriptConfigStore:
    """Persistent string-keyed store scoped to one product."""

    def __init__(self, product_name: str, path: Path | None = None) -> None:
        self.product_name = product_name
        self.path = path or get_script_store_path()

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.path, "rb") as f:
                return tomllib.load(f)
        except FileNotFoundError:
            return {}
        except tomllib.TOMLDecodeError as e:
            logger.warning("Ignoring unreadable script store %s: %s", self.path, e)
            return {}
        except OSError as e:
            raise ScriptError(f"Cannot read script store {self.path}: {e}") from e

    def _save(self, data: dict[str, Any]) -> None:
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="wb", dir=self.path.parent, delete=False, suffix=".tmp"
            ) as f:
                tmp_path = Path(f.name)
                tomli_w.dump(data, f)
            os.replace(str(tmp_path), str(self.path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise ScriptError(f"Cannot write script store {self.path}: {e}") from e

    def _section(self, data: dict[str, Any]) -> dict[str, Any]:
        section = data.get(self.product_name)
        return section if isinstance(section, dict) else {}

    def get(self, key: str, default: ScalarValue | None = None) -> ScalarValue | None:
        """Read a value."""
        return self._section(self._load()).get(key, default)

    def set(self, key: str, value: ScalarValue) -> None:
        """Write a value."""
        data = self._load()
        section = self._section(data)
        section[key] = value
        data[self.product_name] = section
        self._save(data)

    def delete(self, key: str) -> bool:
        """Delete a value.

        Returns:
            True if the key existed.
        """
        data = self._load()
        section = self._section(data)
        if key not in section:
            return False
        del section[key]
        data[self.product_name] = section
        self._save(data)
        return True
