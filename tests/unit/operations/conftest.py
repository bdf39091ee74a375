"""Fixtures for the operation tests."""

import zipfile
from pathlib import Path

import pytest
from deployctl.core.app import DeployApp
from deployctl.core.mode import ExecutionMode
from deployctl.models.package import Package
from deployctl.models.product import Product
from deployctl.transport.local import FileTransport
from fakes import FakePlatform


@pytest.fixture
def app(product: Product, target_dir: Path, platform: FakePlatform) -> DeployApp:
    """Application acting on the target directory with a loaded journal."""
    target_dir.mkdir(parents=True, exist_ok=True)
    deploy_app = DeployApp(
        product,
        target_dir,
        ExecutionMode.API,
        platform=platform,
        transport=FileTransport(),
    )
    deploy_app.load_summary()
    return deploy_app


@pytest.fixture
def package() -> Package:
    return Package(
        name="core",
        display_name="Core",
        version="1.0",
        archive="core-1.0.zip",
        sha1="",
    )


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    """Zip with nested files and an explicit directory entry."""
    path = tmp_path / "core-1.0.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("bin/", "")
        zf.writestr("bin/tool", "#!/bin/sh\n")
        zf.writestr("share/doc/readme.txt", "hello")
        zf.writestr("top.txt", "top")
    return path
