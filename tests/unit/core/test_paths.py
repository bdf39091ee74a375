"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths.
"""

from pathlib import Path

import pytest
from deployctl.core.paths import (
    APP_NAME,
    ensure_applications_dir,
    ensure_download_dir,
    get_applications_dir,
    get_cache_dir,
    get_config_dir,
    get_config_path,
    get_download_dir,
    get_lock_path,
    get_product_path,
    get_script_store_path,
    get_summary_path,
)


class TestXdgDirs:
    """Tests for the XDG base directory lookups."""

    def test_default_config_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """get_config_dir falls back to ~/.config when XDG_CONFIG_HOME is unset."""
        monkeypatch.delenv("XDG_CONFIG_HOME")
        assert get_config_dir() == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / APP_NAME

    def test_default_cache_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("XDG_CACHE_HOME")
        assert get_cache_dir() == Path.home() / ".cache" / APP_NAME

    def test_empty_variable_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An empty XDG variable counts as unset."""
        monkeypatch.setenv("XDG_CACHE_HOME", "")
        assert get_cache_dir() == Path.home() / ".cache" / APP_NAME

    def test_applications_dir_is_not_namespaced(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Desktop entries go to the shared applications directory."""
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert get_applications_dir() == tmp_path / "applications"


class TestConveniencePaths:
    """Tests for convenience path functions."""

    def test_user_files(self) -> None:
        assert get_config_path() == get_config_dir() / "config.toml"
        assert get_script_store_path() == get_config_dir() / "script-store.toml"
        assert get_download_dir() == get_cache_dir() / "downloads"

    def test_install_dir_files(self, tmp_path: Path) -> None:
        assert get_summary_path(tmp_path) == tmp_path / "deployctl_summary.json"
        assert get_product_path(tmp_path) == tmp_path / "product.toml"

    def test_lock_path_is_sidecar(self, tmp_path: Path) -> None:
        summary = tmp_path / "deployctl_summary.json"
        assert get_lock_path(summary) == tmp_path / "deployctl_summary.json.lock"


class TestEnsureDirs:
    """Tests for directory creation functions."""

    def test_ensure_download_dir_creates_directory(self) -> None:
        result = ensure_download_dir()
        assert result == get_download_dir()
        assert result.is_dir()

    def test_ensure_applications_dir_idempotent(self) -> None:
        first = ensure_applications_dir()
        second = ensure_applications_dir()
        assert first == second
        assert first.is_dir()

    def test_ensure_dir_failure_raises_runtime_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A file in the way of the directory is reported as RuntimeError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        monkeypatch.setenv("XDG_CACHE_HOME", str(blocker))

        with pytest.raises(RuntimeError, match="download cache"):
            ensure_download_dir()
