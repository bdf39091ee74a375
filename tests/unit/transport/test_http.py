"""Tests for the HTTP transport against a local aiohttp server."""

import asyncio
import socket
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
from aiohttp import web
from deployctl.core.cancel import CancellationToken
from deployctl.core.errors import ContentVerificationError, TransportError, WorkloadAbortedError
from deployctl.transport import HttpTransport

PAYLOAD = b"z" * 50_000


async def _serve_archive(request: web.Request) -> web.Response:
    return web.Response(body=PAYLOAD, content_type="application/zip")


async def _serve_descriptor(request: web.Request) -> web.Response:
    return web.Response(text='{"application_name": "demo"}', content_type="application/json")


async def _serve_truncated(request: web.Request) -> web.StreamResponse:
    response = web.StreamResponse(headers={"Content-Length": "1000"})
    await response.prepare(request)
    await response.write(b"x" * 10)
    # Drop the connection before the announced length was sent
    request.transport.close()  # type: ignore[union-attr]
    return response


def run_with_server(scenario: Callable[[str], Awaitable[Any]]) -> Any:
    """Start a local server, run scenario(base_url), then shut the server down."""

    async def _main() -> Any:
        app = web.Application()
        app.router.add_get("/repository.json", _serve_descriptor)
        app.router.add_get("/packages/core.zip", _serve_archive)
        app.router.add_get("/packages/truncated.zip", _serve_truncated)
        runner = web.AppRunner(app)
        await runner.setup()
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        site = web.SockSite(runner, sock)
        await site.start()
        port = sock.getsockname()[1]
        try:
            return await scenario(f"http://127.0.0.1:{port}")
        finally:
            await runner.cleanup()

    return asyncio.run(_main())


class TestHttpTransport:
    """Tests for HttpTransport."""

    def test_get_text(self) -> None:
        text = run_with_server(lambda base: HttpTransport().get_text(f"{base}/repository.json"))
        assert text == '{"application_name": "demo"}'

    def test_get_text_not_found(self) -> None:
        with pytest.raises(TransportError, match="HTTP 404"):
            run_with_server(lambda base: HttpTransport().get_text(f"{base}/missing.json"))

    def test_download(self, tmp_path: Path) -> None:
        destination = tmp_path / "core.zip"
        progress: list[float] = []

        written = run_with_server(
            lambda base: HttpTransport(chunk_size=8192).download(
                f"{base}/packages/core.zip", destination, progress=progress.append
            )
        )

        assert written == len(PAYLOAD)
        assert destination.read_bytes() == PAYLOAD
        assert progress[-1] == 100.0

    def test_download_cancelled(self, tmp_path: Path) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(WorkloadAbortedError):
            run_with_server(
                lambda base: HttpTransport().download(
                    f"{base}/packages/core.zip", tmp_path / "core.zip", cancel=token
                )
            )

    def test_truncated_download(self, tmp_path: Path) -> None:
        with pytest.raises((ContentVerificationError, TransportError)):
            run_with_server(
                lambda base: HttpTransport().download(
                    f"{base}/packages/truncated.zip", tmp_path / "truncated.zip"
                )
            )

    def test_connection_refused(self) -> None:
        transport = HttpTransport(connect_timeout=2)
        with pytest.raises(TransportError):
            asyncio.run(transport.get_text("http://127.0.0.1:9/repository.json"))
