"""Install, update and uninstall orchestrators."""

from deployctl.workloads.base import RunHandle, Workload, WorkloadGate
from deployctl.workloads.installer import Installer
from deployctl.workloads.uninstaller import Uninstaller
from deployctl.workloads.updater import Updater

__all__ = ["Installer", "RunHandle", "Uninstaller", "Updater", "Workload", "WorkloadGate"]
