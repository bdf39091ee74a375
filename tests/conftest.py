"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from deployctl.core.mode import ENV_EXECUTION_MODE, ENV_WORKING_DIRECTORY, ExecutionMode
from deployctl.models.product import Product
from fakes import FakePlatform, RepositoryBuilder


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point every user directory at a temporary home and clear mode markers."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    # Blank counts as unset; monkeypatch undoes whatever the code writes later
    monkeypatch.setenv(ENV_EXECUTION_MODE, "")
    monkeypatch.setenv(ENV_WORKING_DIRECTORY, "")
    return home


@pytest.fixture
def repo(tmp_path: Path) -> RepositoryBuilder:
    """Empty file-based repository."""
    return RepositoryBuilder(tmp_path / "repo")


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """Install directory configured in the product (not created)."""
    return tmp_path / "target"


@pytest.fixture
def product(repo: RepositoryBuilder, target_dir: Path) -> Product:
    """Product pointing at the test repository and target directory."""
    return Product(
        name="demo",
        title="Demo App",
        publisher="Acme",
        product_url="https://example.com/demo",
        repository=str(repo.root),
        target_directory=str(target_dir),
    )


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def fresh_env() -> dict[str, str]:
    """Environment of a standalone fresh installer run."""
    return {ENV_EXECUTION_MODE: ExecutionMode.FRESH_INSTALLATION.value}


@pytest.fixture
def maintenance_env(target_dir: Path) -> dict[str, str]:
    """Environment of a maintenance tool run from the target directory."""
    return {
        ENV_EXECUTION_MODE: ExecutionMode.MAINTENANCE_TOOL.value,
        ENV_WORKING_DIRECTORY: str(target_dir),
    }
