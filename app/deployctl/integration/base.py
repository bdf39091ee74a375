"""Abstract base class for platform integration.

The operation performers delegate every native OS mutation to a
PlatformIntegration so that the journal engine stays platform neutral.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deployctl.models.product import Product


class PlatformIntegration(ABC):
    """Native integration primitives.

    Creation methods raise PlatformError on failure. Removal methods
    return False when there was nothing to remove instead of raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short platform name for logging."""

    @abstractmethod
    def create_symlink(self, original: Path, link_dir: Path, link_name: str) -> Path:
        """Create ``link_dir/link_name`` pointing at original.

        Returns:
            Path of the created link.
        """

    @abstractmethod
    def remove_symlink(self, link_dir: Path, link_name: str) -> bool:
        """Remove a link created by create_symlink."""

    @abstractmethod
    def create_app_entry(self, product: Product, name: str, install_dir: Path) -> Path:
        """Register the product's maintenance tool with the desktop.

        Args:
            product: Product being installed.
            name: Maintenance tool executable name.
            install_dir: Directory the product is installed in.

        Returns:
            Path of the created entry.
        """

    @abstractmethod
    def remove_app_entry(self, product: Product, name: str) -> bool:
        """Remove the entry created by create_app_entry."""

    @abstractmethod
    def create_maintenance_tool(self, product: Product, install_dir: Path, name: str) -> Path:
        """Place the maintenance tool launcher into the install directory.

        Returns:
            Path of the launcher.
        """

    @abstractmethod
    def remove_maintenance_tool(self, install_dir: Path, name: str) -> bool:
        """Remove the launcher created by create_maintenance_tool."""

    @abstractmethod
    def terminate_processes_under(self, folder: Path) -> int:
        """Terminate processes whose executable lives under folder.

        The current process and its children are never terminated.

        Returns:
            Number of terminated processes.
        """
