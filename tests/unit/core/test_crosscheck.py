"""Unit tests for the installed/remote cross-check."""

import pytest
from deployctl.core.crosscheck import cross_check
from deployctl.core.errors import VersionParseError
from deployctl.core.versioning import Ordering
from deployctl.models.package import Package
from deployctl.models.summary import PackageInstallation


def _remote(name: str, version: str) -> Package:
    return Package(name=name, display_name=name, version=version, archive=f"{name}.zip", sha1="")


def _local(name: str, version: str) -> PackageInstallation:
    return PackageInstallation.from_package(_remote(name, version))


class TestCrossCheck:
    """Tests for cross_check."""

    @pytest.fixture
    def installed(self) -> list[PackageInstallation]:
        return [_local("core", "1.0"), _local("docs", "2.0"), _local("legacy", "0.9")]

    def test_partitions_remote_packages(self, installed: list[PackageInstallation]) -> None:
        """Every remote package is either matched or not installed."""
        remote = [_remote("core", "1.1"), _remote("docs", "2.0"), _remote("extras", "1.0")]

        result = cross_check(installed, remote)

        assert [pair.name for pair in result.map] == ["core", "docs"]
        assert [pkg.name for pkg in result.not_installed] == ["extras"]
        assert len(result.map) + len(result.not_installed) == len(remote)

    def test_updates_are_strictly_newer(self, installed: list[PackageInstallation]) -> None:
        """updates holds exactly the pairs whose remote version is greater."""
        remote = [_remote("core", "1.1"), _remote("docs", "2.0"), _remote("legacy", "0.8")]

        result = cross_check(installed, remote)

        assert [pair.name for pair in result.updates] == ["core"]
        assert all(pair.ordering is Ordering.GREATER for pair in result.updates)
        assert result.has_updates

    def test_reinstalls_and_downgrades(self, installed: list[PackageInstallation]) -> None:
        remote = [_remote("core", "1.1"), _remote("docs", "2.0"), _remote("legacy", "0.8")]

        result = cross_check(installed, remote)

        assert [pair.name for pair in result.reinstalls()] == ["docs"]
        assert [pair.name for pair in result.downgrades()] == ["legacy"]

    def test_installed_but_unpublished_is_ignored(
        self, installed: list[PackageInstallation]
    ) -> None:
        """Installed packages the repository no longer lists appear nowhere."""
        result = cross_check(installed, [_remote("core", "1.0")])
        assert [pair.name for pair in result.map] == ["core"]
        assert not result.has_updates

    def test_pair_exposes_both_sides(self, installed: list[PackageInstallation]) -> None:
        result = cross_check(installed, [_remote("core", "1.1")])
        pair = result.map[0]
        assert pair.local.version == "1.0"
        assert pair.remote.version == "1.1"
        assert pair.outdated

    def test_to_dict(self, installed: list[PackageInstallation]) -> None:
        result = cross_check(installed, [_remote("core", "1.1"), _remote("extras", "3.0")])
        assert result.to_dict() == {
            "packages": [
                {
                    "name": "core",
                    "installed_version": "1.0",
                    "latest_version": "1.1",
                    "outdated": True,
                }
            ],
            "not_installed": [{"name": "extras", "latest_version": "3.0"}],
        }

    def test_invalid_remote_version_raises(self, installed: list[PackageInstallation]) -> None:
        with pytest.raises(VersionParseError):
            cross_check(installed, [_remote("core", "1.x")])
