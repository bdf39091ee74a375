"""Freedesktop/POSIX platform integration."""

from __future__ import annotations

import logging
import os
import shlex
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import psutil

from deployctl.core.errors import PlatformError
from deployctl.core.paths import ensure_applications_dir, get_applications_dir
from deployctl.integration.base import PlatformIntegration
from deployctl.utils.shell import make_executable

if TYPE_CHECKING:
    from deployctl.models.product import Product

logger = logging.getLogger(__name__)

TERMINATE_TIMEOUT = 5.0


def desktop_entry_name(product: Product) -> str:
    """File name of the product's desktop entry."""
    return f"{product.name}-maintenancetool.desktop"


def render_desktop_entry(product: Product, executable: Path) -> str:
    """Render a freedesktop entry launching the maintenance tool."""
    lines = [
        "[Desktop Entry]",
        "Type=Application",
        f"Name={product.display_title} Maintenance Tool",
        f"Comment=Install, update or remove {product.display_title} components",
        f"Exec={shlex.quote(str(executable))}",
        f"Path={executable.parent}",
        "Terminal=true",
        "Categories=Utility;",
    ]
    return "\n".join(lines) + "\n"


def render_launcher(install_dir: Path) -> str:
    """Render the maintenance tool launcher script."""
    python = shlex.quote(sys.executable)
    target = shlex.quote(str(install_dir))
    return f'#!/bin/sh\ncd {target} || exit 1\nexec {python} -m deployctl "$@"\n'


class DesktopIntegration(PlatformIntegration):
    """Integration for Linux desktops following the freedesktop conventions."""

    @property
    def name(self) -> str:
        return "desktop"

    def create_symlink(self, original: Path, link_dir: Path, link_name: str) -> Path:
        link = link_dir / link_name
        try:
            link_dir.mkdir(parents=True, exist_ok=True)
            if link.is_symlink():
                link.unlink()
            os.symlink(original, link)
        except OSError as e:
            raise PlatformError(f"Cannot create link {link} -> {original}: {e}") from e
        logger.debug("Created link %s -> %s", link, original)
        return link

    def remove_symlink(self, link_dir: Path, link_name: str) -> bool:
        link = link_dir / link_name
        if not link.is_symlink():
            return False
        try:
            link.unlink()
        except OSError as e:
            raise PlatformError(f"Cannot remove link {link}: {e}") from e
        return True

    def create_app_entry(self, product: Product, name: str, install_dir: Path) -> Path:
        try:
            entry = ensure_applications_dir() / desktop_entry_name(product)
            entry.write_text(render_desktop_entry(product, install_dir / name), encoding="utf-8")
        except (OSError, RuntimeError) as e:
            raise PlatformError(f"Cannot create desktop entry for {product.name}: {e}") from e
        logger.debug("Created desktop entry %s", entry)
        return entry

    def remove_app_entry(self, product: Product, name: str) -> bool:
        entry = get_applications_dir() / desktop_entry_name(product)
        try:
            entry.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PlatformError(f"Cannot remove desktop entry {entry}: {e}") from e
        return True

    def create_maintenance_tool(self, product: Product, install_dir: Path, name: str) -> Path:
        launcher = install_dir / name
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            launcher.write_text(render_launcher(install_dir), encoding="utf-8")
            make_executable(launcher)
        except OSError as e:
            raise PlatformError(f"Cannot create maintenance tool {launcher}: {e}") from e
        logger.debug("Created maintenance tool %s for %s", launcher, product.name)
        return launcher

    def remove_maintenance_tool(self, install_dir: Path, name: str) -> bool:
        launcher = install_dir / name
        try:
            launcher.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PlatformError(f"Cannot remove maintenance tool {launcher}: {e}") from e
        return True

    def terminate_processes_under(self, folder: Path) -> int:
        root = str(folder.expanduser().resolve())
        current = psutil.Process()
        spared = {current.pid} | {child.pid for child in current.children(recursive=True)}

        victims: list[psutil.Process] = []
        for process in psutil.process_iter(["pid", "exe"]):
            exe = process.info.get("exe")
            if not exe or process.info["pid"] in spared:
                continue
            if exe == root or exe.startswith(root + os.sep):
                victims.append(process)

        for process in victims:
            logger.info("Terminating process %d (%s)", process.pid, process.info["exe"])
            try:
                process.terminate()
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning("Not allowed to terminate process %d", process.pid)

        _, alive = psutil.wait_procs(victims, timeout=TERMINATE_TIMEOUT)
        for process in alive:
            try:
                process.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                logger.warning("Process %d survived termination", process.pid)
        return len(victims)
