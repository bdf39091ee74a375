"""Native OS integration: links, desktop entries, maintenance tool, processes."""

from deployctl.integration.base import PlatformIntegration
from deployctl.integration.desktop import DesktopIntegration

__all__ = ["DesktopIntegration", "PlatformIntegration", "get_platform"]


def get_platform() -> PlatformIntegration:
    """Return the integration for the running platform."""
    return DesktopIntegration()
