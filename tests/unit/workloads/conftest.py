"""Fixtures for the workload tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from deployctl.core.paths import get_summary_path
from deployctl.core.summary import InstallationSummary
from deployctl.models.product import Product
from deployctl.workloads import Installer
from fakes import FakePlatform, RepositoryBuilder, run_workload


@pytest.fixture
def journal(target_dir: Path) -> Callable[[], InstallationSummary]:
    """Reader for the journal persisted in the target directory."""

    def _read() -> InstallationSummary:
        return InstallationSummary.load(get_summary_path(target_dir))

    return _read


@pytest.fixture
def installed(
    repo: RepositoryBuilder,
    product: Product,
    platform: FakePlatform,
    fresh_env: dict[str, str],
) -> RepositoryBuilder:
    """Repository with core and extras, both installed by a fresh run."""
    repo.add("core", "1.0", {"bin/core": "core 1.0", "share/core.txt": "notes"})
    repo.add("extras", "1.0", {"extras/readme.txt": "extras 1.0"})
    result = run_workload(Installer(product, environ=fresh_env, platform=platform))
    assert result.ok, result.error
    return repo
