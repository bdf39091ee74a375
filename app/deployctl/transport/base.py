"""Transport interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deployctl.core.cancel import CancellationToken

# Receives completion percentage (0.0-100.0)
ProgressCallback = Callable[[float], None]


class Transport(ABC):
    """Abstract base class for fetching remote resources.

    Implementations raise TransportError when a resource cannot be
    fetched and ContentVerificationError when it arrives truncated.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short transport name for logging."""
        ...

    @abstractmethod
    async def get_text(self, url: str) -> str:
        """Fetch a small text resource.

        Args:
            url: Resource location.

        Returns:
            Decoded UTF-8 text.
        """
        ...

    @abstractmethod
    async def download(
        self,
        url: str,
        destination: Path,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> int:
        """Stream a resource to a file.

        Args:
            url: Resource location.
            destination: File to write; parent directories must exist.
            progress: Optional callback receiving percentage complete.
            cancel: Optional token checked between chunks.

        Returns:
            Number of bytes written.
        """
        ...
