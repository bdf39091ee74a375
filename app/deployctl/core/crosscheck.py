"""Cross-check engine comparing installed packages with the repository.

Pairs every remote package with its local installation (by name),
selects the pairs whose remote version is strictly greater, and lists
the remote packages that are not installed yet.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from deployctl.core.versioning import Ordering, version_compare

if TYPE_CHECKING:
    from deployctl.models.package import Package
    from deployctl.models.summary import PackageInstallation


@dataclass(frozen=True, slots=True)
class PackagePair:
    """A remote package matched with its local installation.

    Attributes:
        local: The installed package entry.
        remote: The package published by the repository.
        ordering: Remote version compared with the local version.
    """

    local: PackageInstallation
    remote: Package
    ordering: Ordering

    @property
    def name(self) -> str:
        return self.remote.name

    @property
    def outdated(self) -> bool:
        return self.ordering is Ordering.GREATER


@dataclass(frozen=True, slots=True)
class CrossCheckSummary:
    """Result of comparing local installations with remote packages.

    Attributes:
        map: Every remote package that has a local counterpart.
        updates: Pairs whose remote version is strictly greater.
        not_installed: Remote packages with no local counterpart.
    """

    map: tuple[PackagePair, ...]
    updates: tuple[PackagePair, ...]
    not_installed: tuple[Package, ...]

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)

    def reinstalls(self) -> tuple[PackagePair, ...]:
        """Pairs whose remote version equals the installed version."""
        return tuple(pair for pair in self.map if pair.ordering is Ordering.EQUAL)

    def downgrades(self) -> tuple[PackagePair, ...]:
        """Pairs whose remote version is lower than the installed version."""
        return tuple(pair for pair in self.map if pair.ordering is Ordering.LESS)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "packages": [
                {
                    "name": pair.name,
                    "installed_version": pair.local.version,
                    "latest_version": pair.remote.version,
                    "outdated": pair.outdated,
                }
                for pair in self.map
            ],
            "not_installed": [
                {"name": package.name, "latest_version": package.version}
                for package in self.not_installed
            ],
        }


def cross_check(
    installed: Iterable[PackageInstallation],
    remote: Iterable[Package],
) -> CrossCheckSummary:
    """Compare installed packages with remote packages.

    Args:
        installed: Local installation entries.
        remote: Candidate remote packages, in repository order.

    Returns:
        CrossCheckSummary ordered like the remote packages.

    Raises:
        VersionParseError: If a compared version is not strictly numeric.
    """
    local_by_name = {entry.name: entry for entry in installed}
    pairs: list[PackagePair] = []
    not_installed: list[Package] = []

    for package in remote:
        local = local_by_name.get(package.name)
        if local is None:
            not_installed.append(package)
            continue
        ordering = version_compare(package.version, local.version)
        pairs.append(PackagePair(local=local, remote=package, ordering=ordering))

    return CrossCheckSummary(
        map=tuple(pairs),
        updates=tuple(pair for pair in pairs if pair.ordering is Ordering.GREATER),
        not_installed=tuple(not_installed),
    )
