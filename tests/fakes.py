"""Test doubles shared by the test modules.

RepositoryBuilder writes a real file-based repository (descriptor plus
zipped packages) that FileTransport can serve; FakePlatform keeps
desktop integration state in memory.
"""

import asyncio
import json
import zipfile
from pathlib import Path
from typing import Any

from deployctl.integration.base import PlatformIntegration
from deployctl.models.product import Product
from deployctl.models.workload import WorkloadResult
from deployctl.utils.hashing import sha1_file
from deployctl.workloads import Workload


class RepositoryBuilder:
    """Writes a file-based repository: repository.json plus zipped packages."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.packages_dir = root / "packages"
        self.packages_dir.mkdir(parents=True, exist_ok=True)
        self.entries: list[dict[str, Any]] = []
        self.script: str | None = None
        self.write()

    def add(
        self,
        name: str,
        version: str,
        files: dict[str, str],
        *,
        default: bool = True,
        script: str | None = None,
        sha1: str | None = None,
    ) -> dict[str, Any]:
        """Publish (or replace) a package built from a files mapping."""
        archive = f"{name}-{version}.zip"
        path = self.packages_dir / archive
        with zipfile.ZipFile(path, "w") as zf:
            for relative, content in files.items():
                zf.writestr(relative, content)
        entry: dict[str, Any] = {
            "name": name,
            "display_name": name.title(),
            "version": version,
            "release_date": "2026-01-01",
            "default": default,
            "archive": archive,
            "size": path.stat().st_size,
            "sha1": sha1_file(path) if sha1 is None else sha1,
        }
        if script is not None:
            script_name = f"{name}.py"
            (self.packages_dir / script_name).write_text(script)
            entry["script"] = script_name
        self.entries = [e for e in self.entries if e["name"] != name] + [entry]
        self.write()
        return entry

    def set_global_script(self, source: str) -> None:
        (self.root / "installscript.py").write_text(source)
        self.script = "installscript.py"
        self.write()

    def write(self) -> None:
        descriptor: dict[str, Any] = {
            "application_name": "demo",
            "packages": self.entries,
            "size": sum(e["size"] for e in self.entries),
        }
        if self.script is not None:
            descriptor["script"] = self.script
        (self.root / "repository.json").write_text(json.dumps(descriptor, indent=2))


class FakePlatform(PlatformIntegration):
    """Platform integration that keeps desktop state in memory."""

    def __init__(self) -> None:
        self.app_entries: set[str] = set()
        self.terminated: list[Path] = []

    @property
    def name(self) -> str:
        return "fake"

    def create_symlink(self, original: Path, link_dir: Path, link_name: str) -> Path:
        link_dir.mkdir(parents=True, exist_ok=True)
        link = link_dir / link_name
        link.symlink_to(original)
        return link

    def remove_symlink(self, link_dir: Path, link_name: str) -> bool:
        link = link_dir / link_name
        if not link.is_symlink():
            return False
        link.unlink()
        return True

    def create_app_entry(self, product: Product, name: str, install_dir: Path) -> Path:
        self.app_entries.add(f"{product.name}/{name}")
        return install_dir / f"{name}.desktop"

    def remove_app_entry(self, product: Product, name: str) -> bool:
        key = f"{product.name}/{name}"
        if key not in self.app_entries:
            return False
        self.app_entries.remove(key)
        return True

    def create_maintenance_tool(self, product: Product, install_dir: Path, name: str) -> Path:
        launcher = install_dir / name
        launcher.write_text("#!/bin/sh\n")
        return launcher

    def remove_maintenance_tool(self, install_dir: Path, name: str) -> bool:
        launcher = install_dir / name
        if not launcher.exists():
            return False
        launcher.unlink()
        return True

    def terminate_processes_under(self, folder: Path) -> int:
        self.terminated.append(folder)
        return 0


def run_workload(workload: Workload) -> WorkloadResult:
    """Execute a workload to completion on a fresh event loop."""
    return asyncio.run(workload.execute())
