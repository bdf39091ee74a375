"""Updater workload."""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping
from typing import TYPE_CHECKING

from deployctl.core.crosscheck import CrossCheckSummary, PackagePair
from deployctl.scripting import Hook
from deployctl.workloads.base import Workload

if TYPE_CHECKING:
    from deployctl.core.cancel import CancellationToken
    from deployctl.core.config import DeployConfig
    from deployctl.core.context import AppContext
    from deployctl.integration import PlatformIntegration
    from deployctl.models.product import Product
    from deployctl.transport import Transport

logger = logging.getLogger(__name__)


class Updater(Workload):
    """Updates installed packages to the versions the repository publishes.

    Only strictly newer versions are applied unless ``reinstall`` (equal
    versions) or ``allow_downgrade`` (older versions) is set. Everything
    not applied is logged.
    """

    name = "update"

    def __init__(
        self,
        product: Product,
        packages: Iterable[str] | None = None,
        *,
        reinstall: bool = False,
        allow_downgrade: bool = False,
        context: AppContext | None = None,
        transport: Transport | None = None,
        platform: PlatformIntegration | None = None,
        config: DeployConfig | None = None,
        cancel: CancellationToken | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            product,
            packages,
            context=context,
            transport=transport,
            platform=platform,
            config=config,
            cancel=cancel,
            environ=environ,
        )
        self.reinstall = reinstall
        self.allow_downgrade = allow_downgrade

    async def run(self) -> None:
        app = self.app
        repository = await app.fetch_repository()
        check = app.summary.cross_check(repository.packages)
        pairs = self.select(check)
        logger.info("Updating %d package(s)", len(pairs))

        script = await app.load_global_script()
        if script is not None:
            await script.invoke(Hook.BEFORE_UPDATE)

        for pair in pairs:
            app.check_cancelled()
            await self.update(pair)
            app.persist_summary()

        if script is not None:
            await script.invoke(Hook.AFTER_UPDATE)

    def select(self, check: CrossCheckSummary) -> list[PackagePair]:
        """Pairs to act on, in repository order."""
        wanted: set[str] = {pair.name for pair in check.updates}
        for pair in check.reinstalls():
            if self.reinstall:
                wanted.add(pair.name)
            else:
                logger.info("%s %s is up to date", pair.name, pair.local.version)
        for pair in check.downgrades():
            if self.allow_downgrade:
                wanted.add(pair.name)
            else:
                logger.warning(
                    "Repository publishes older %s %s (installed %s), not downgrading",
                    pair.name,
                    pair.remote.version,
                    pair.local.version,
                )

        if self.packages is not None:
            known = {pair.name for pair in check.map}
            for name in self.packages:
                if name not in known:
                    logger.warning("Package %s is not installed, cannot update it", name)

        selected: list[PackagePair] = []
        for pair in check.map:
            if pair.name not in wanted:
                continue
            if self.packages is not None and pair.name not in self.packages:
                logger.info("Skipping update of %s (not requested)", pair.name)
                continue
            selected.append(pair)
        return selected

    async def update(self, pair: PackagePair) -> None:
        app = self.app
        package_file = await app.download_package(pair.remote)
        try:
            script = await app.load_package_script(pair.remote)
            await app.update_package(pair.local, package_file, script)
        finally:
            package_file.discard()
