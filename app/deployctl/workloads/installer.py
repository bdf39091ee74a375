"""Installer workload."""

from __future__ import annotations

import logging

from deployctl.models.package import Package
from deployctl.models.summary import OperationKind
from deployctl.scripting import Hook
from deployctl.workloads.base import Workload

logger = logging.getLogger(__name__)


class Installer(Workload):
    """Installs the default packages, or an explicit subset.

    Packages are installed in repository order. The first failure stops
    the run; packages installed before it stay installed and journaled.
    A package left incomplete by an earlier run is reverted and installed
    again.
    """

    name = "install"

    async def run(self) -> None:
        app = self.app
        await app.fetch_repository()
        script = await app.load_global_script()
        if script is not None:
            await script.invoke(Hook.BEFORE_INSTALL)

        app.install_dir.mkdir(parents=True, exist_ok=True)
        app.write_product()

        targets = self.targets()
        logger.info("Installing %d package(s)", len(targets))
        for package in targets:
            app.check_cancelled()
            installation = app.summary.find(package.name)
            if installation is not None:
                if installation.completed:
                    logger.info("Package %s is already installed, skipping", package.name)
                    continue
                app.discard_incomplete(installation)
            await self.install(package)
            app.persist_summary()

        if app.is_fresh_install and not self._has_maintenance_tool():
            app.create_maintenance_tool()
            app.create_app_entry()

        if script is not None:
            await script.invoke(Hook.AFTER_INSTALL)

    def targets(self) -> list[Package]:
        """Packages to install, in repository order."""
        repository = self.app.repository
        if self.packages is None:
            return repository.get_default_packages()
        return repository.select(self.packages)

    async def install(self, package: Package) -> None:
        app = self.app
        package_file = await app.download_package(package)
        try:
            script = await app.load_package_script(package)
            await app.install_package(package_file, script)
        finally:
            package_file.discard()

    def _has_maintenance_tool(self) -> bool:
        return any(
            record.kind is OperationKind.CREATE_MAINTENANCE_TOOL
            for record in self.app.summary.history
        )
