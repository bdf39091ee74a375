"""Running application state shared by the workloads.

DeployApp binds a product to its install directory, journal, repository,
transport and platform integration, and provides the per-package steps
the orchestrators sequence: download and verify, install, update and
uninstall.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from pathlib import Path

from deployctl.core.cancel import CancellationToken
from deployctl.core.config import DeployConfig
from deployctl.core.context import AppContext
from deployctl.core.errors import (
    ContentVerificationError,
    DeployError,
    FileSystemError,
    ScriptError,
)
from deployctl.core.mode import ExecutionMode, get_execution_mode, resolve_install_directory
from deployctl.core.paths import ensure_download_dir, get_product_path, get_summary_path
from deployctl.core.product import parse_repository, product_to_toml, save_product
from deployctl.core.summary import InstallationSummary
from deployctl.integration import PlatformIntegration, get_platform
from deployctl.models.package import Package, Repository
from deployctl.models.product import Product
from deployctl.models.summary import OperationHistory, OperationKind, PackageInstallation
from deployctl.models.workload import WorkloadState
from deployctl.operations import (
    MAINTENANCE_TOOL_NAME,
    CreateAppEntry,
    CreateFile,
    CreateMaintenanceTool,
    CreateSymlink,
    ExtractArchive,
    Operation,
    OperationPerformer,
    parse_payload,
)
from deployctl.operations.files import CreateFilePayload
from deployctl.scripting import Hook, HookCapabilities, HookScript
from deployctl.transport import Transport, transport_for
from deployctl.utils.hashing import parse_sha1_sidecar, sha1_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PackageFile:
    """A downloaded and verified package archive.

    Attributes:
        package: The package the archive belongs to.
        path: Local path of the archive.
    """

    package: Package
    path: Path

    def discard(self) -> None:
        """Delete the downloaded archive."""
        self.path.unlink(missing_ok=True)


class DeployApp:
    """Everything a workload needs to act on one install directory."""

    def __init__(
        self,
        product: Product,
        install_dir: Path,
        mode: ExecutionMode,
        *,
        context: AppContext | None = None,
        transport: Transport | None = None,
        platform: PlatformIntegration | None = None,
        config: DeployConfig | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        self.product = product
        self.install_dir = install_dir
        self.mode = mode
        self.config = config or DeployConfig()
        self.context = context or AppContext()
        self.transport = transport or transport_for(product.repository, self.config)
        self.platform = platform or get_platform()
        self.cancel = cancel or CancellationToken()
        self.formatter = product.create_formatter()
        self._summary: InstallationSummary | None = None
        self._repository: Repository | None = None

    @classmethod
    def create(
        cls,
        product: Product,
        *,
        environ: MutableMapping[str, str] | None = None,
        context: AppContext | None = None,
        transport: Transport | None = None,
        platform: PlatformIntegration | None = None,
        config: DeployConfig | None = None,
        cancel: CancellationToken | None = None,
    ) -> DeployApp:
        """Resolve the execution mode and install directory for a product."""
        mode = get_execution_mode(environ)
        install_dir = resolve_install_directory(product, mode, environ)
        logger.debug("Mode %s, install directory %s", mode.value, install_dir)
        return cls(
            product,
            install_dir,
            mode,
            context=context,
            transport=transport,
            platform=platform,
            config=config,
            cancel=cancel,
        )

    @property
    def is_fresh_install(self) -> bool:
        return self.mode is ExecutionMode.FRESH_INSTALLATION

    @property
    def summary_path(self) -> Path:
        return get_summary_path(self.install_dir)

    @property
    def summary(self) -> InstallationSummary:
        if self._summary is None:
            msg = "Installation summary has not been loaded"
            raise RuntimeError(msg)
        return self._summary

    @property
    def has_repository(self) -> bool:
        return self._repository is not None

    @property
    def repository(self) -> Repository:
        if self._repository is None:
            msg = "Repository has not been fetched"
            raise RuntimeError(msg)
        return self._repository

    # -- context ------------------------------------------------------------

    def set_state(self, state: WorkloadState) -> None:
        self.context.set_state(state)

    def set_progress(self, progress: float) -> None:
        self.context.set_progress(progress)

    def check_cancelled(self) -> None:
        """Raise WorkloadAbortedError if the run was cancelled."""
        self.cancel.raise_if_cancelled()

    # -- journal and repository --------------------------------------------

    def load_summary(self) -> InstallationSummary:
        """Load the journal for this run.

        A fresh install starts from an empty journal unless an earlier,
        interrupted installer run left one in the target directory. Other
        modes load the journal in the install directory, recovering from
        damage.
        """
        if self.is_fresh_install and not self.summary_path.exists():
            summary = InstallationSummary.default(self.product, self.install_dir)
        else:
            summary = InstallationSummary.read_or_create(self.product, self.install_dir)
        self._summary = summary
        self.context.summary = summary
        return summary

    def persist_summary(self) -> None:
        """Save the journal to disk."""
        self.summary.save()

    def history_for(self, package: str | None) -> OperationHistory:
        """History of a package, or the global history when package is None.

        Raises:
            InstallationNotFoundError: If the package is not installed.
        """
        if package is None:
            return self.summary.history
        return self.summary.require(package).history

    async def fetch_repository(self) -> Repository:
        """Fetch and parse the repository descriptor."""
        self.set_state(WorkloadState.fetching_remote_tree(self.product.display_title))
        text = await self.transport.get_text(self.product.repository_url())
        self._repository = parse_repository(text, self.formatter)
        self.set_progress(100.0)
        logger.info(
            "Repository %s publishes %d package(s)",
            self._repository.application_name,
            len(self._repository.packages),
        )
        return self._repository

    def terminate_running(self) -> None:
        """Stop earlier instances running from the install directory."""
        if self.mode is not ExecutionMode.MAINTENANCE_TOOL or not self.config.terminate_running:
            return
        count = self.platform.terminate_processes_under(self.install_dir)
        if count:
            logger.info("Terminated %d process(es) under %s", count, self.install_dir)

    def package_for(self, installation: PackageInstallation) -> Package:
        """Remote package matching an installation, or a stand-in built from it."""
        if self._repository is not None:
            package = self._repository.get_package(installation.name)
            if package is not None:
                return package
        return Package(
            name=installation.name,
            display_name=installation.display_name,
            version=installation.version,
            default=installation.default,
            archive="",
            sha1="",
        )

    # -- downloads ----------------------------------------------------------

    @staticmethod
    def _download_path(name: str) -> Path:
        try:
            return ensure_download_dir() / Path(name).name
        except RuntimeError as e:
            raise FileSystemError(str(e)) from e

    async def download_package(self, package: Package) -> PackageFile:
        """Download a package archive and verify its SHA-1.

        Raises:
            TransportError: If the archive cannot be fetched.
            ContentVerificationError: If the archive hash does not match.
        """
        self.check_cancelled()
        self.set_state(WorkloadState.downloading(package.display_name or package.name))
        destination = self._download_path(package.archive)
        try:
            await self.transport.download(
                self.product.package_url(package.archive),
                destination,
                progress=self.set_progress,
                cancel=self.cancel,
            )
        except DeployError:
            destination.unlink(missing_ok=True)
            raise

        expected = package.sha1
        if not expected:
            sidecar = await self.transport.get_text(self.product.package_hash_url(package.archive))
            expected = parse_sha1_sidecar(sidecar)
        actual = sha1_file(destination)
        if actual != expected:
            destination.unlink(missing_ok=True)
            msg = f"Checksum mismatch for {package.archive}: expected {expected}, got {actual}"
            raise ContentVerificationError(msg)
        return PackageFile(package=package, path=destination)

    async def download_dependency(self, uri: str, state_text: str) -> Path:
        """Download an auxiliary executable requested by a hook script."""
        self.set_state(WorkloadState.downloading(state_text))
        destination = self._download_path(uri.rstrip("/"))
        await self.transport.download(
            self.formatter.format(uri),
            destination,
            progress=self.set_progress,
            cancel=self.cancel,
        )
        return destination

    async def load_script(self, url: str, name: str, package: str | None = None) -> HookScript:
        """Fetch and mount a hook script."""
        source = await self.transport.get_text(url)
        script = HookScript(source, name)
        script.mount(HookCapabilities(self, package), self.formatter.replacements)
        return script

    async def load_global_script(self) -> HookScript | None:
        """Fetch the global script, from the repository or the product."""
        script = None
        if self._repository is not None:
            script = self._repository.script
        script = script or self.product.script
        if not script:
            return None
        return await self.load_script(self.product.global_script_url(script), script)

    async def load_package_script(self, package: Package) -> HookScript | None:
        if not package.script:
            return None
        return await self.load_script(
            self.product.package_script_url(package.script), package.script, package.name
        )

    # -- operations ---------------------------------------------------------

    def execute(self, performer: OperationPerformer, package: str | None = None) -> None:
        """Execute a new operation and journal it in memory."""
        self.check_cancelled()
        Operation(performer).execute(self, package)

    def revert_history(self, name: str | None, package: Package | None = None) -> int:
        """Revert a history newest first, continuing past failures.

        Args:
            name: Owning package name; None for the global history.
            package: Remote package used to rebuild package-scoped records.

        Returns:
            Number of operations that failed to revert.
        """
        records = self.history_for(name).reversed()
        failures = 0
        for index, record in enumerate(records, start=1):
            try:
                Operation.from_record(record, package).revert(self, name)
            except (DeployError, OSError) as e:
                failures += 1
                logger.error("Failed to revert %s operation: %s", record.kind.value, e)
            self.set_progress(index * 100.0 / len(records))
        return failures

    def write_product(self) -> Path:
        """Write the product descriptor into the install directory.

        The file is journaled once, globally; later runs refresh it in place.
        """
        path = get_product_path(self.install_dir)
        if self._has_global_file(path):
            save_product(self.product, path)
        else:
            self.execute(CreateFile(path, content=product_to_toml(self.product)))
        return path

    def _has_global_file(self, path: Path) -> bool:
        for record in self.summary.history:
            if record.kind is not OperationKind.CREATE_FILE:
                continue
            payload = parse_payload(record, CreateFilePayload)
            if Path(payload.destination) == path:
                return True
        return False

    def create_symlink(
        self, original: Path, link_dir: Path, link_name: str, package: str | None = None
    ) -> None:
        self.execute(CreateSymlink(original, link_dir, link_name), package)

    def create_app_entry(
        self, name: str = MAINTENANCE_TOOL_NAME, package: str | None = None
    ) -> None:
        self.execute(CreateAppEntry(name), package)

    def create_maintenance_tool(self, name: str = MAINTENANCE_TOOL_NAME) -> None:
        self.execute(CreateMaintenanceTool(name))

    # -- package steps ------------------------------------------------------

    async def install_package(
        self, package_file: PackageFile, script: HookScript | None = None
    ) -> PackageInstallation:
        """Install a downloaded package.

        The installation entry is added first so that operations journal
        into it; a failure leaves the operations completed so far recorded
        and the entry marked incomplete.
        """
        package = package_file.package
        self.set_state(WorkloadState.installing(package.display_name or package.name))
        installation = self.summary.add_package(package)
        if script is not None:
            await script.invoke(Hook.BEFORE_INSTALL)
        self.execute(ExtractArchive(package, self.install_dir, package_file.path), package.name)
        if script is not None:
            await script.invoke(Hook.AFTER_INSTALL)
        installation.completed = True
        logger.info("Installed %s %s", package.name, package.version)
        return installation

    async def update_package(
        self,
        installation: PackageInstallation,
        package_file: PackageFile,
        script: HookScript | None = None,
    ) -> PackageInstallation:
        """Replace an installed package with a downloaded release.

        The old operations are reverted newest first, continuing past
        failures, then the new release is executed into the same entry.
        """
        package = package_file.package
        self.set_state(WorkloadState.removing_outdated(package.display_name or package.name))
        if script is not None:
            await script.invoke(Hook.BEFORE_UPDATE)
        installation.completed = False
        failures = self.revert_history(installation.name, self.package_for(installation))
        if failures:
            logger.warning("%d operation(s) of %s could not be reverted", failures, package.name)

        self.set_state(WorkloadState.installing(package.display_name or package.name))
        self.execute(ExtractArchive(package, self.install_dir, package_file.path), package.name)
        previous = installation.version
        installation.mark_updated(package)
        if script is not None:
            await script.invoke(Hook.AFTER_UPDATE)
        installation.completed = True
        logger.info("Updated %s from %s to %s", package.name, previous, package.version)
        return installation

    async def uninstall_package(
        self, installation: PackageInstallation, script: HookScript | None = None
    ) -> int:
        """Remove an installed package, continuing past revert failures.

        Hook failures are logged and counted like revert failures.

        Returns:
            Number of hooks and operations that failed.
        """
        self.set_state(WorkloadState.removing(installation.display_name or installation.name))
        failures = 0
        if not await self._invoke_tolerant(script, Hook.BEFORE_UNINSTALL):
            failures += 1
        failures += self.revert_history(installation.name, self.package_for(installation))
        if not await self._invoke_tolerant(script, Hook.AFTER_UNINSTALL):
            failures += 1
        self.summary.remove_package(installation.name)
        if failures:
            logger.warning(
                "Removed %s with %d failed step(s)",
                installation.name,
                failures,
            )
        else:
            logger.info("Removed %s", installation.name)
        return failures

    def discard_incomplete(self, installation: PackageInstallation) -> None:
        """Revert what an unfinished install or update left behind and drop its entry."""
        logger.warning(
            "Package %s %s was not fully installed, reverting %d operation(s)",
            installation.name,
            installation.version,
            len(installation.history),
        )
        failures = self.revert_history(installation.name, self.package_for(installation))
        if failures:
            logger.warning(
                "%d operation(s) of %s could not be reverted", failures, installation.name
            )
        self.summary.remove_package(installation.name)

    @staticmethod
    async def _invoke_tolerant(script: HookScript | None, hook: Hook) -> bool:
        """Run a hook, logging instead of raising on script failure."""
        if script is None:
            return True
        try:
            await script.invoke(hook)
        except ScriptError as e:
            logger.error("%s", e)
            return False
        return True
