"""Embedding API.

DeployClient is the surface a host application uses to query and apply
updates without running the standalone CLI:

    client = DeployClient(load_product(Path("product.toml")))
    check = client.check_for_updates()
    if any(p.outdated for p in check.packages):
        client.apply_updates(callback=lambda snapshot, field: print(snapshot.label))

At most one workload runs per client gate; a request made while one is
active returns None without touching the active run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from deployctl.core.app import DeployApp
from deployctl.core.config import DeployConfig
from deployctl.core.context import AppContext, Subscriber
from deployctl.integration import PlatformIntegration
from deployctl.models.package import Package
from deployctl.models.product import Product
from deployctl.models.workload import WorkloadResult
from deployctl.transport import Transport
from deployctl.workloads import Installer, Uninstaller, Updater, Workload, WorkloadGate

logger = logging.getLogger(__name__)


class WorkloadKind(str, Enum):
    """Workloads a client can start."""

    INSTALL = "install"
    UPDATE = "update"
    UNINSTALL = "uninstall"


@dataclass(frozen=True, slots=True)
class PackageVersioning:
    """Installed and published version of one package.

    Attributes:
        name: Package name.
        installed_version: Version in the journal.
        latest_version: Version published by the repository.
        outdated: True when the published version is newer.
    """

    name: str
    installed_version: str
    latest_version: str
    outdated: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "installed_version": self.installed_version,
            "latest_version": self.latest_version,
            "outdated": self.outdated,
        }


@dataclass(frozen=True, slots=True)
class UpdateCheck:
    """Result of check_for_updates.

    Attributes:
        packages: Installed packages with their published versions.
        not_installed: Published packages that are not installed.
    """

    packages: tuple[PackageVersioning, ...]
    not_installed: tuple[Package, ...]

    @property
    def has_updates(self) -> bool:
        return any(package.outdated for package in self.packages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "packages": [package.to_dict() for package in self.packages],
            "not_installed": [
                {"name": package.name, "display_name": package.display_name, "version": package.version}
                for package in self.not_installed
            ],
        }


class DeployClient:
    """Entry point for embedding deployctl into a host application."""

    def __init__(
        self,
        product: Product,
        *,
        transport: Transport | None = None,
        platform: PlatformIntegration | None = None,
        config: DeployConfig | None = None,
        gate: WorkloadGate | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.product = product
        self.transport = transport
        self.platform = platform
        self.config = config or DeployConfig()
        self.gate = gate or WorkloadGate()
        self.environ = environ

    @property
    def busy(self) -> bool:
        """Whether a workload is running."""
        return self.gate.busy

    def cancel(self) -> bool:
        """Cancel the running workload, if any."""
        return self.gate.cancel_active()

    async def check_for_updates_async(self, names: Iterable[str] | None = None) -> UpdateCheck:
        """Compare the journal with the repository.

        Args:
            names: Restrict the check to these packages.

        Raises:
            DeployError: If the repository cannot be fetched or parsed, or a
                name is unknown to the repository.
        """
        app = DeployApp.create(
            self.product,
            environ=self.environ,
            transport=self.transport,
            platform=self.platform,
            config=self.config,
        )
        summary = app.load_summary()
        repository = await app.fetch_repository()
        candidates = repository.select(names) if names is not None else repository.packages
        check = summary.cross_check(candidates)
        return UpdateCheck(
            packages=tuple(
                PackageVersioning(
                    name=pair.name,
                    installed_version=pair.local.version,
                    latest_version=pair.remote.version,
                    outdated=pair.outdated,
                )
                for pair in check.map
            ),
            not_installed=check.not_installed,
        )

    def check_for_updates(self, names: Iterable[str] | None = None) -> UpdateCheck:
        """Blocking variant of check_for_updates_async."""
        return asyncio.run(self.check_for_updates_async(names))

    async def run_workload(
        self,
        kind: WorkloadKind,
        names: Iterable[str] | None = None,
        callback: Subscriber | None = None,
        **options: Any,
    ) -> WorkloadResult | None:
        """Run a workload if none is active.

        Args:
            kind: Workload to run.
            names: Explicit package subset, or None for the default set.
            callback: Invoked with every context change.
            **options: Extra workload options (``reinstall``, ``allow_downgrade``
                for updates).

        Returns:
            The workload result, or None when another workload is active.
        """
        handle = self.gate.checkout()
        if handle is None:
            logger.info("Rejected %s request: a workload is already running", kind.value)
            return None

        with handle:
            context = AppContext()
            if callback is not None:
                context.subscribe(callback)
            workload = self._create(kind, names, context, handle.cancel, options)
            return await workload.execute()

    def apply_updates(
        self, names: Iterable[str] | None = None, callback: Subscriber | None = None, **options: Any
    ) -> WorkloadResult | None:
        """Update installed packages (blocking)."""
        return asyncio.run(self.run_workload(WorkloadKind.UPDATE, names, callback, **options))

    def install_packages(
        self, names: Iterable[str] | None = None, callback: Subscriber | None = None
    ) -> WorkloadResult | None:
        """Install packages (blocking)."""
        return asyncio.run(self.run_workload(WorkloadKind.INSTALL, names, callback))

    def remove_packages(
        self, names: Iterable[str] | None = None, callback: Subscriber | None = None
    ) -> WorkloadResult | None:
        """Uninstall packages (blocking)."""
        return asyncio.run(self.run_workload(WorkloadKind.UNINSTALL, names, callback))

    def _create(
        self,
        kind: WorkloadKind,
        names: Iterable[str] | None,
        context: AppContext,
        cancel: Any,
        options: dict[str, Any],
    ) -> Workload:
        common: dict[str, Any] = {
            "context": context,
            "transport": self.transport,
            "platform": self.platform,
            "config": self.config,
            "cancel": cancel,
            "environ": self.environ,
        }
        if kind is WorkloadKind.INSTALL:
            return Installer(self.product, names, **common)
        if kind is WorkloadKind.UPDATE:
            return Updater(self.product, names, **options, **common)
        return Uninstaller(self.product, names, **common)
