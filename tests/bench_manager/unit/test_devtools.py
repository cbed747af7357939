"""Unit tests for the DevTools tab listing client."""

import socket

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from bench_manager.core.devtools import list_page_urls, list_url, page_urls
from bench_manager.core.errors import BenchIOError, ParseError


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def _serve(payload, status: int = 200) -> TestServer:
    async def handle_list(request: web.Request) -> web.Response:
        if status != 200:
            return web.Response(status=status)
        if isinstance(payload, str):
            return web.Response(text=payload, content_type="application/json")
        return web.json_response(payload)

    app = web.Application()
    app.router.add_get("/json/list", handle_list)
    server = TestServer(app, host="127.0.0.1", port=_free_port())
    await server.start_server()
    return server


class TestPageUrls:
    """Tests for target filtering."""

    def test_only_pages_with_urls(self):
        targets = [
            {"type": "page", "url": "https://a"},
            {"type": "service_worker", "url": "https://sw"},
            {"type": "page", "url": ""},
            {"type": "page"},
            "garbage",
            {"type": "page", "url": "chrome://newtab/"},
        ]
        assert page_urls(targets) == ["https://a", "chrome://newtab/"]

    def test_list_url(self):
        assert list_url(9222) == "http://127.0.0.1:9222/json/list"


class TestListPageUrls:
    """Tests against a local HTTP endpoint."""

    @pytest.mark.asyncio
    async def test_fetches_open_pages(self):
        server = await _serve([
            {"type": "page", "url": "https://docs.python.org"},
            {"type": "background_page", "url": "chrome-extension://x"},
        ])
        try:
            assert await list_page_urls(server.port) == ["https://docs.python.org"]
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_unreachable(self):
        with pytest.raises(BenchIOError, match="unreachable"):
            await list_page_urls(_free_port(), timeout=0.5)

    @pytest.mark.asyncio
    async def test_http_error(self):
        server = await _serve(None, status=500)
        try:
            with pytest.raises(BenchIOError):
                await list_page_urls(server.port)
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_not_a_list(self):
        server = await _serve({"type": "page"})
        try:
            with pytest.raises(ParseError, match="target list"):
                await list_page_urls(server.port)
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        server = await _serve("{oops")
        try:
            with pytest.raises(ParseError, match="invalid JSON"):
                await list_page_urls(server.port)
        finally:
            await server.close()
