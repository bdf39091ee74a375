"""Lifecycle hook scripts.

Repositories may ship Python hook scripts, globally and per package.
A script is executed once to define its hooks, with two names in scope:

- ``installer``: a HookCapabilities object, the only way back into the
  running workload.
- ``placeholders``: read-only mapping of the ``@{...}`` template values.

Hooks are module-level functions named after the Hook values; they may
be plain or ``async``. A script without a given hook simply skips it.

Example script::

    async def on_after_install():
        code = await installer.download_and_execute(
            "https://example.com/runtime-setup", "Installing runtime", ["--quiet"]
        )
        installer.config_set("runtime_exit_code", code)
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from deployctl.core.errors import DeployError, ScriptError, WorkloadAbortedError
from deployctl.models.workload import StateKind, WorkloadState
from deployctl.scripting.store import ScalarValue, ScriptConfigStore
from deployctl.utils.shell import make_executable, run_command, spawn_detached

if TYPE_CHECKING:
    from collections.abc import Sequence

    from deployctl.core.app import DeployApp

logger = logging.getLogger(__name__)

MOUNTED = "mounted"


class Hook(str, Enum):
    """Lifecycle hook names."""

    BEFORE_INSTALL = "on_before_install"
    AFTER_INSTALL = "on_after_install"
    BEFORE_UPDATE = "on_before_update"
    AFTER_UPDATE = "on_after_update"
    BEFORE_UNINSTALL = "on_before_uninstall"
    AFTER_UNINSTALL = "on_after_uninstall"


class HookCapabilities:
    """Operations a hook script may perform on the running workload.

    Symlinks and app entries created through here are journaled like
    any other operation, in the owning package's history (or the global
    history for global scripts), so uninstall reverts them.
    """

    def __init__(
        self,
        app: DeployApp,
        package: str | None = None,
        store: ScriptConfigStore | None = None,
    ) -> None:
        self._app = app
        self._package = package
        self._store = store or ScriptConfigStore(app.product.name)

    @property
    def state(self) -> str | None:
        """Label of the current workload state."""
        return self._app.context.snapshot().label

    @property
    def progress(self) -> float:
        return self._app.context.progress

    def set_state(self, text: str) -> None:
        """Replace the subject of the running state, e.g. "Installing runtime".

        Keeps the current state kind; outside a running state the subject is
        published as an installing state.
        """
        current = self._app.context.state
        if current is None or current.is_terminal:
            kind = StateKind.INSTALLING_COMPONENT
        else:
            kind = current.kind
        self._app.set_state(WorkloadState(kind, text))

    def set_progress(self, progress: float) -> None:
        self._app.set_progress(progress)

    @property
    def install_dir(self) -> str:
        return str(self._app.install_dir)

    @property
    def package(self) -> str | None:
        """Name of the package the script belongs to; None for global scripts."""
        return self._package

    async def download_and_execute(
        self,
        uri: str,
        state_text: str,
        arguments: Sequence[str] = (),
        attached: bool = True,
    ) -> int | None:
        """Download an executable dependency and run it.

        Args:
            uri: Location of the executable.
            state_text: Label shown while downloading.
            arguments: Command line arguments.
            attached: Wait for the process and return its exit code when True;
                start it detached otherwise.

        Returns:
            Exit code for attached runs, None for detached runs.
        """
        path = await self._app.download_dependency(uri, state_text)
        try:
            make_executable(path)
            args = [str(path), *arguments]
            if attached:
                result = run_command(args, cwd=str(self._app.install_dir))
                logger.info("Dependency %s exited with %d", path.name, result.returncode)
                return result.returncode
            pid = spawn_detached(args, cwd=str(self._app.install_dir))
            logger.info("Started dependency %s (pid %d)", path.name, pid)
            return None
        except OSError as e:
            raise ScriptError(f"Cannot run dependency {path.name}: {e}") from e

    def create_symlink(self, original: str, link_dir: str, link_name: str) -> None:
        """Create and journal a symbolic link."""
        self._app.create_symlink(Path(original), Path(link_dir), link_name, self._package)

    def create_app_entry(self, name: str) -> None:
        """Create and journal a desktop entry for the maintenance tool."""
        self._app.create_app_entry(name, self._package)

    def config_get(self, key: str, default: ScalarValue | None = None) -> ScalarValue | None:
        return self._store.get(key, default)

    def config_set(self, key: str, value: ScalarValue) -> None:
        self._store.set(key, value)

    def config_delete(self, key: str) -> bool:
        return self._store.delete(key)


class HookScript:
    """A loaded hook script."""

    def __init__(self, source: str, name: str) -> None:
        self.source = source
        self.name = name
        self._namespace: dict[str, Any] | None = None

    @property
    def mounted(self) -> bool:
        return self._namespace is not None

    def mount(self, capabilities: HookCapabilities, placeholders: dict[str, str]) -> None:
        """Execute the script body and call its ``mounted()`` hook.

        Raises:
            ScriptError: If the script cannot be compiled or fails to load.
        """
        namespace: dict[str, Any] = {
            "__name__": f"deployctl_hook_{self.name}",
            "installer": capabilities,
            "placeholders": MappingProxyType(dict(placeholders)),
        }
        try:
            code = compile(self.source, self.name, "exec")
            exec(code, namespace)  # noqa: S102
        except SyntaxError as e:
            raise ScriptError(f"Syntax error in script {self.name}: {e}") from e
        except Exception as e:
            raise ScriptError(f"Script {self.name} failed to load: {e}") from e
        self._namespace = namespace

        on_mounted = namespace.get(MOUNTED)
        if callable(on_mounted):
            try:
                on_mounted()
            except Exception as e:
                raise ScriptError(f"Script {self.name} failed in mounted(): {e}") from e

    def has_hook(self, hook: Hook) -> bool:
        return self._namespace is not None and callable(self._namespace.get(hook.value))

    async def invoke(self, hook: Hook) -> None:
        """Run a hook if the script defines it.

        Raises:
            ScriptError: If the hook raises.
        """
        if self._namespace is None:
            msg = f"Script {self.name} is not mounted"
            raise ScriptError(msg)
        function = self._namespace.get(hook.value)
        if not callable(function):
            logger.debug("Script %s has no %s hook", self.name, hook.value)
            return

        logger.info("Running %s from %s", hook.value, self.name)
        try:
            result = function()
            if inspect.isawaitable(result):
                await result
        except (ScriptError, WorkloadAbortedError):
            raise
        except DeployError as e:
            raise ScriptError(f"{hook.value} in {self.name} failed: {e}") from e
        except Exception as e:
            raise ScriptError(f"{hook.value} in {self.name} raised {type(e).__name__}: {e}") from e
