"""Unit tests for the script key/value store."""

from pathlib import Path

import pytest
from deployctl.core.errors import ScriptError
from deployctl.core.paths import get_script_store_path
from deployctl.scripting import ScriptConfigStore


class TestScriptConfigStore:
    """Tests for ScriptConfigStore."""

    def test_defaults_to_user_config(self) -> None:
        assert ScriptConfigStore("demo").path == get_script_store_path()

    def test_values_are_scoped_per_product(self, tmp_path: Path) -> None:
        path = tmp_path / "store.toml"
        ScriptConfigStore("demo", path).set("channel", "beta")
        ScriptConfigStore("other", path).set("channel", "stable")

        assert ScriptConfigStore("demo", path).get("channel") == "beta"
        assert ScriptConfigStore("other", path).get("channel") == "stable"

    def test_scalar_types_survive(self, tmp_path: Path) -> None:
        store = ScriptConfigStore("demo", tmp_path / "store.toml")
        store.set("count", 3)
        store.set("ratio", 0.5)
        store.set("enabled", False)

        assert store.get("count") == 3
        assert store.get("ratio") == 0.5
        assert store.get("enabled") is False

    def test_unreadable_file_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "store.toml"
        path.write_text("not = = toml")
        store = ScriptConfigStore("demo", path)

        assert store.get("key", "fallback") == "fallback"
        store.set("key", "value")
        assert store.get("key") == "value"

    def test_write_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = ScriptConfigStore("demo", blocker / "store.toml")
        with pytest.raises(ScriptError):
            store.set("key", "value")
