"""Fixtures for the CLI tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from deployctl.core.config import DeployConfig, save_config
from deployctl.core.product import save_product
from deployctl.models.product import Product


@pytest.fixture(autouse=True)
def quiet_config(isolated_environment: Path) -> DeployConfig:
    """User config keeping log records out of the captured output."""
    config = DeployConfig(log_level="WARNING", terminate_running=False)
    save_config(config)
    return config


@pytest.fixture
def product_file(product: Product, tmp_path: Path) -> Path:
    """Product descriptor written next to the repository."""
    return save_product(product, tmp_path / "product.toml")


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    """Undo the level and handler the CLI installs on the package logger."""
    package_logger = logging.getLogger("deployctl")
    level, handlers = package_logger.level, list(package_logger.handlers)
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers
