"""Installation summary (journal) lifecycle.

The summary is the durable record of installed packages and of the
product-level operations executed in an install directory. It is held
in memory during a workload and saved explicitly; mutations are never
auto-flushed.

Lifecycle:
- ``default``: empty summary for a brand-new install, not yet on disk.
- ``read_or_create``: load an existing journal; an absent file is
  created empty, a corrupt one is logged and replaced by the default.
- ``load``: strict load used by execution-mode detection.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import TYPE_CHECKING

from pydantic import ValidationError

from deployctl.core.crosscheck import CrossCheckSummary, cross_check
from deployctl.core.errors import (
    InstallationNotFoundError,
    PackageAlreadyInstalledError,
    SerializationError,
)
from deployctl.core.paths import get_summary_path
from deployctl.models.summary import OperationHistory, PackageInstallation, SummaryData

if TYPE_CHECKING:
    from collections.abc import Iterable

    from deployctl.core.formatter import TemplateFormat
    from deployctl.models.package import Package
    from deployctl.models.product import Product

logger = logging.getLogger(__name__)


class InstallationSummary:
    """The journal bound to one install directory.

    Attributes:
        path: Summary file location.
        data: The journal payload.
    """

    def __init__(self, path: Path, data: SummaryData) -> None:
        self.path = path
        self.data = data

    @classmethod
    def default(cls, product: Product, install_dir: Path) -> InstallationSummary:
        """Create an empty summary for a fresh install."""
        return cls(
            get_summary_path(install_dir),
            SummaryData(application_name=product.name),
        )

    @classmethod
    def read_or_create(cls, product: Product, install_dir: Path) -> InstallationSummary:
        """Load the journal in an install directory, recovering from damage.

        A missing file is created empty. Unparseable content is logged and
        replaced by an empty summary; the previous journal is lost.

        Args:
            product: Product the install directory belongs to.
            install_dir: Directory holding the journal.

        Returns:
            The loaded or default summary.
        """
        path = get_summary_path(install_dir)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No installation summary at %s, creating one", path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
            return cls.default(product, install_dir)
        except OSError as e:
            logger.warning("Cannot read installation summary %s: %s", path, e)
            return cls.default(product, install_dir)

        try:
            data = parse_summary(text, product.create_formatter())
        except SerializationError as e:
            logger.warning("Discarding unreadable installation summary %s: %s", path, e)
            return cls.default(product, install_dir)
        return cls(path, data)

    @classmethod
    def load(cls, path: Path, formatter: TemplateFormat | None = None) -> InstallationSummary:
        """Strictly load a summary file.

        Raises:
            SerializationError: If the file is missing or cannot be parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Cannot read installation summary {path}: {e}"
            raise SerializationError(msg) from e
        return cls(path, parse_summary(text, formatter))

    @staticmethod
    def is_valid_at(install_dir: Path) -> bool:
        """Whether a parseable summary exists in a directory."""
        try:
            InstallationSummary.load(get_summary_path(install_dir))
        except SerializationError:
            return False
        return True

    @property
    def application_name(self) -> str:
        return self.data.application_name

    @property
    def packages(self) -> list[PackageInstallation]:
        return self.data.packages

    @property
    def history(self) -> OperationHistory:
        """Product-level operations."""
        return self.data.history

    @property
    def is_empty(self) -> bool:
        return not self.data.packages

    def find(self, name: str) -> PackageInstallation | None:
        """Find the live installation entry for a package.

        The returned entry is not a copy; changes apply to the summary.
        """
        for installation in self.data.packages:
            if installation.name == name:
                return installation
        return None

    def require(self, name: str) -> PackageInstallation:
        """Find an installation entry or fail.

        Raises:
            InstallationNotFoundError: If the package is not installed.
        """
        installation = self.find(name)
        if installation is None:
            msg = f"Package '{name}' is not installed"
            raise InstallationNotFoundError(msg)
        return installation

    def add_package(self, package: Package) -> PackageInstallation:
        """Add an installation entry for a package.

        Raises:
            PackageAlreadyInstalledError: If the package already has an entry.
        """
        if self.find(package.name) is not None:
            msg = f"Package '{package.name}' is already installed"
            raise PackageAlreadyInstalledError(msg)
        installation = PackageInstallation.from_package(package)
        self.data.packages.append(installation)
        return installation

    def remove_package(self, name: str) -> PackageInstallation:
        """Remove an installation entry.

        Raises:
            InstallationNotFoundError: If the package is not installed.
        """
        installation = self.require(name)
        self.data.packages.remove(installation)
        return installation

    def cross_check(self, packages: Iterable[Package]) -> CrossCheckSummary:
        """Compare installed packages with remote packages."""
        return cross_check(self.data.packages, packages)

    def to_json(self) -> str:
        return self.data.model_dump_json(indent=2)

    def save(self) -> Path:
        """Write the summary to disk.

        The file is written to a temporary file in the same directory and
        moved into place with os.replace().

        Returns:
            Path where the summary was saved.

        Raises:
            SerializationError: If the file cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                f.write(self.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            msg = f"Failed to write installation summary {self.path}: {e}"
            raise SerializationError(msg) from e
        logger.debug("Saved installation summary %s", self.path)
        return self.path


def parse_summary(text: str, formatter: TemplateFormat | None = None) -> SummaryData:
    """Parse journal text, expanding placeholders first.

    Raises:
        SerializationError: If the text is not a valid summary.
    """
    if formatter is not None:
        text = formatter.format_json(text)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise SerializationError(msg) from e
    try:
        return SummaryData.model_validate(payload)
    except ValidationError as e:
        msg = f"Invalid summary content: {e}"
        raise SerializationError(msg) from e
