"""Transports for fetching repository descriptors, archives and scripts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from deployctl.transport.base import ProgressCallback, Transport
from deployctl.transport.http import HttpTransport
from deployctl.transport.local import FileTransport

if TYPE_CHECKING:
    from deployctl.core.config import DeployConfig

__all__ = ["FileTransport", "HttpTransport", "ProgressCallback", "Transport", "transport_for"]


def transport_for(uri: str, config: DeployConfig | None = None) -> Transport:
    """Pick the transport able to serve a repository base URI."""
    if uri.startswith(("http://", "https://")):
        return HttpTransport.from_config(config)
    return FileTransport()
