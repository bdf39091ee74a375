"""Transport for repositories on the local filesystem.

Accepts ``file://`` URIs and plain paths, which makes offline mirrors
and test repositories usable without a web server.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from deployctl.core.errors import TransportError
from deployctl.transport.base import ProgressCallback, Transport

if TYPE_CHECKING:
    from deployctl.core.cancel import CancellationToken

logger = logging.getLogger(__name__)


def uri_to_path(uri: str) -> Path:
    """Convert a ``file://`` URI or plain path to a Path."""
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri).expanduser()


class FileTransport(Transport):
    """Copies resources from the local filesystem."""

    def __init__(self, chunk_size: int = 65536) -> None:
        self.chunk_size = chunk_size

    @property
    def name(self) -> str:
        return "file"

    async def get_text(self, url: str) -> str:
        path = uri_to_path(url)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Cannot read {path}: {e}") from e

    async def download(
        self,
        url: str,
        destination: Path,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> int:
        source = uri_to_path(url)
        written = 0
        try:
            total = source.stat().st_size
            with open(source, "rb") as src, open(destination, "wb") as dst:
                while chunk := src.read(self.chunk_size):
                    if cancel is not None:
                        cancel.raise_if_cancelled()
                    dst.write(chunk)
                    written += len(chunk)
                    if progress is not None and total:
                        progress(written * 100.0 / total)
        except OSError as e:
            raise TransportError(f"Cannot copy {source}: {e}") from e
        if progress is not None:
            progress(100.0)
        logger.debug("Copied %d bytes from %s", written, source)
        return written
