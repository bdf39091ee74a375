"""Execution mode detection.

A standalone process classifies itself once at startup as either a
fresh installer or a maintenance tool and records the result in
environment markers. Code that finds no marker runs embedded as a
library (API mode).
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from deployctl.core.errors import MaintenanceJournalError
from deployctl.core.summary import InstallationSummary

if TYPE_CHECKING:
    from deployctl.models.product import Product

logger = logging.getLogger(__name__)

ENV_EXECUTION_MODE = "DEPLOYCTL_EXECUTION_MODE"
ENV_WORKING_DIRECTORY = "DEPLOYCTL_WORKING_DIRECTORY"


class ExecutionMode(str, Enum):
    """Detected run context.

    Attributes:
        FRESH_INSTALLATION: Standalone installer for a new install.
        MAINTENANCE_TOOL: Standalone process acting on an existing install.
        API: Embedded call with no environment marker set.
    """

    FRESH_INSTALLATION = "fresh-installation"
    MAINTENANCE_TOOL = "maintenance-tool"
    API = "api"


def _canonical(path: Path) -> Path:
    return path.expanduser().resolve()


def detect_execution_mode(product: Product, cwd: Path | None = None) -> ExecutionMode:
    """Classify a standalone run from filesystem evidence.

    Args:
        product: Product being deployed.
        cwd: Working directory (defaults to the process working directory).

    Returns:
        FRESH_INSTALLATION or MAINTENANCE_TOOL.

    Raises:
        MaintenanceJournalError: If running from the target directory
            without a valid journal there.
    """
    working_dir = _canonical(cwd or Path.cwd())
    target_dir = _canonical(product.target_path)
    has_journal = InstallationSummary.is_valid_at(working_dir)

    if working_dir == target_dir:
        if not has_journal:
            msg = (
                f"Running from install directory {working_dir} but no valid "
                "installation summary was found there"
            )
            raise MaintenanceJournalError(msg)
        return ExecutionMode.MAINTENANCE_TOOL

    if has_journal:
        logger.info("Found installation summary in relocated directory %s", working_dir)
        return ExecutionMode.MAINTENANCE_TOOL

    return ExecutionMode.FRESH_INSTALLATION


def define_execution_mode(
    product: Product,
    cwd: Path | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> ExecutionMode:
    """Detect the execution mode once and record it in the environment.

    A mode already recorded by an earlier call is returned unchanged.

    Raises:
        MaintenanceJournalError: See detect_execution_mode.
    """
    env = os.environ if environ is None else environ
    recorded = env.get(ENV_EXECUTION_MODE)
    if recorded:
        return ExecutionMode(recorded)

    working_dir = _canonical(cwd or Path.cwd())
    mode = detect_execution_mode(product, working_dir)
    env[ENV_EXECUTION_MODE] = mode.value
    env[ENV_WORKING_DIRECTORY] = str(working_dir)
    logger.debug("Execution mode: %s (cwd %s)", mode.value, working_dir)
    return mode


def get_execution_mode(environ: MutableMapping[str, str] | None = None) -> ExecutionMode:
    """Read the recorded execution mode; API mode when none is recorded."""
    env = os.environ if environ is None else environ
    recorded = env.get(ENV_EXECUTION_MODE)
    if not recorded:
        return ExecutionMode.API
    try:
        return ExecutionMode(recorded)
    except ValueError:
        logger.warning("Ignoring unknown execution mode marker: %s", recorded)
        return ExecutionMode.API


def get_working_directory(environ: MutableMapping[str, str] | None = None) -> Path:
    """Read the recorded working directory, or the current one."""
    env = os.environ if environ is None else environ
    recorded = env.get(ENV_WORKING_DIRECTORY)
    return Path(recorded) if recorded else Path.cwd()


def resolve_install_directory(
    product: Product,
    mode: ExecutionMode,
    environ: MutableMapping[str, str] | None = None,
) -> Path:
    """Directory a workload acts on.

    A fresh install targets the product's configured directory; every
    other mode acts on the directory the process runs from.
    """
    if mode is ExecutionMode.FRESH_INSTALLATION:
        return product.target_path
    return get_working_directory(environ)
