"""HTTP transport backed by aiohttp."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import aiohttp

from deployctl.core.errors import ContentVerificationError, TransportError
from deployctl.transport.base import ProgressCallback, Transport

if TYPE_CHECKING:
    from deployctl.core.cancel import CancellationToken
    from deployctl.core.config import DeployConfig

logger = logging.getLogger(__name__)

HTTP_OK = 200


class HttpTransport(Transport):
    """Fetches resources over HTTP(S) with streamed downloads.

    A session is opened per request; workloads issue few requests and
    may run on short-lived event loops.
    """

    def __init__(
        self,
        timeout: int = 300,
        connect_timeout: int = 30,
        chunk_size: int = 65536,
    ) -> None:
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.chunk_size = chunk_size

    @classmethod
    def from_config(cls, config: DeployConfig | None) -> HttpTransport:
        if config is None:
            return cls()
        return cls(
            timeout=config.request_timeout,
            connect_timeout=config.connect_timeout,
            chunk_size=config.chunk_size,
        )

    @property
    def name(self) -> str:
        return "http"

    def _client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout, connect=self.connect_timeout)

    async def get_text(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            async with aiohttp.ClientSession(timeout=self._client_timeout()) as session:
                async with session.get(url) as response:
                    if response.status != HTTP_OK:
                        msg = f"GET {url} failed: HTTP {response.status}"
                        raise TransportError(msg)
                    return await response.text(encoding="utf-8")
        except asyncio.TimeoutError as e:
            raise TransportError(f"GET {url} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

    async def download(
        self,
        url: str,
        destination: Path,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> int:
        logger.info("Downloading %s", url)
        written = 0
        try:
            async with aiohttp.ClientSession(timeout=self._client_timeout()) as session:
                async with session.get(url) as response:
                    if response.status != HTTP_OK:
                        msg = f"Download of {url} failed: HTTP {response.status}"
                        raise TransportError(msg)
                    total = response.content_length
                    with open(destination, "wb") as f:
                        async for chunk in response.content.iter_chunked(self.chunk_size):
                            if cancel is not None:
                                cancel.raise_if_cancelled()
                            f.write(chunk)
                            written += len(chunk)
                            if progress is not None and total:
                                progress(written * 100.0 / total)
        except asyncio.TimeoutError as e:
            raise TransportError(f"Download of {url} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Download of {url} failed: {e}") from e
        except OSError as e:
            raise TransportError(f"Cannot write {destination}: {e}") from e

        if total is not None and written != total:
            msg = f"Download of {url} is truncated: got {written} of {total} bytes"
            raise ContentVerificationError(msg)
        if progress is not None:
            progress(100.0)
        logger.debug("Downloaded %d bytes to %s", written, destination)
        return written
