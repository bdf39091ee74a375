"""Uninstaller workload."""

from __future__ import annotations

import logging

from deployctl.core.errors import SerializationError, TransportError
from deployctl.models.summary import PackageInstallation
from deployctl.scripting import Hook, HookScript
from deployctl.workloads.base import Workload

logger = logging.getLogger(__name__)


class Uninstaller(Workload):
    """Removes installed packages, or an explicit subset.

    Uninstall is best effort: a failing revert is logged and the package
    entry is removed anyway. When the last package is gone, the global
    operations (product descriptor, maintenance tool, app entry) are
    reverted too.
    """

    name = "uninstall"

    async def run(self) -> None:
        app = self.app
        try:
            await app.fetch_repository()
        except (TransportError, SerializationError) as e:
            logger.warning("Repository unavailable, uninstalling without scripts: %s", e)

        script = await self._global_script()
        if script is not None:
            await script.invoke(Hook.BEFORE_UNINSTALL)

        targets = self.targets()
        logger.info("Removing %d package(s)", len(targets))
        for installation in targets:
            app.check_cancelled()
            package_script = await self._package_script(installation)
            await app.uninstall_package(installation, package_script)
            app.persist_summary()

        if script is not None:
            await script.invoke(Hook.AFTER_UNINSTALL)

    def targets(self) -> list[PackageInstallation]:
        """Installed packages to remove, in installation order."""
        installed = list(self.app.summary.packages)
        if self.packages is None:
            return installed
        known = {installation.name for installation in installed}
        for name in self.packages:
            if name not in known:
                logger.warning("Package %s is not installed, skipping", name)
        return [installation for installation in installed if installation.name in self.packages]

    async def finalize(self, completed: bool) -> None:
        app = self.app
        if completed and app.summary.is_empty and app.summary.history:
            logger.info("No packages left, removing product files")
            failures = app.revert_history(None)
            if failures:
                logger.warning("%d product operation(s) could not be reverted", failures)
        await super().finalize(completed)

    async def _global_script(self) -> HookScript | None:
        if not self.app.has_repository:
            return None
        return await self.app.load_global_script()

    async def _package_script(self, installation: PackageInstallation) -> HookScript | None:
        if not self.app.has_repository:
            return None
        return await self.app.load_package_script(self.app.package_for(installation))
