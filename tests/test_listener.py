from __future__ import annotations

import pytest
from fastapi import FastAPI

from console.listener import WebServer


def _server(logger) -> WebServer:
    return WebServer(FastAPI(), host="127.0.0.1", port=8123, logger=logger)


@pytest.mark.asyncio
async def test_init_then_close(logger) -> None:
    server = _server(logger)
    assert not server.is_open

    uvicorn_server = server.init()
    assert server.is_open
    assert server.init() is uvicorn_server

    await server.close()

    assert not server.is_open
    assert uvicorn_server.should_exit is True
    assert logger.at("info") == ["[WebServer] Web server closed"]


@pytest.mark.asyncio
async def test_close_is_idempotent(logger) -> None:
    server = _server(logger)
    server.init()

    await server.close()
    await server.close()

    assert not server.is_open
    assert logger.at("info") == ["[WebServer] Web server closed"]


@pytest.mark.asyncio
async def test_close_before_init_is_quiet(logger) -> None:
    server = _server(logger)

    await server.close()

    assert server.closed
    assert logger.lines == []


@pytest.mark.asyncio
async def test_closed_handle_cannot_be_served_again(logger) -> None:
    server = _server(logger)
    server.init()
    await server.close()

    with pytest.raises(RuntimeError):
        await server.serve()
    with pytest.raises(RuntimeError):
        server.init()

    assert not server.is_open
    assert "[WebServer] Starting web server on *: 8123" not in logger.at("info")
