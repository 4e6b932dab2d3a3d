"""
Drowsy - Web Listener
=======================
The bound HTTP server, as an explicitly owned handle.

The handle goes through two phases: init() builds the uvicorn server and
marks the listener open, close() asks it to stop accepting connections and
marks it closed. close() is idempotent. A closed handle cannot be served again.

Usage:
    server = WebServer(app, host="0.0.0.0", port=8000, logger=logger)
    server.init()
    try:
        await server.serve()
    finally:
        await server.close()
"""

from typing import Any

import uvicorn
from fastapi import FastAPI


class WebServer:
    """
    Owns the uvicorn server for the console.

    Attributes:
        app:    FastAPI application to serve.
        host:   Bind address.
        port:   Listening port.
        server: The uvicorn.Server once init() has run, else None.
    """

    def __init__(self, app: FastAPI, host: str, port: int, logger: Any):
        self.app = app
        self.host = host
        self.port = port
        self.logger = logger
        self.server: uvicorn.Server | None = None
        self.closed = False

    @property
    def is_open(self) -> bool:
        """True between init() and close()."""
        return self.server is not None and not self.closed

    def init(self) -> uvicorn.Server:
        """
        Build the uvicorn server. Calling it again returns the same server.

        Raises:
            RuntimeError: If the handle has already been closed.
        """
        if self.closed:
            raise RuntimeError("Web server handle is closed")
        if self.server is None:
            config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level="info")
            self.server = uvicorn.Server(config)
        return self.server

    async def serve(self) -> None:
        """Run the server until close() is called or it is interrupted."""
        server = self.init()
        self.logger.info(f"[WebServer] Starting web server on *: {self.port}")
        await server.serve()

    async def close(self) -> None:
        """Stop accepting connections. Does nothing if already closed."""
        if self.closed:
            return
        self.closed = True
        if self.server is None:
            return
        self.server.should_exit = True
        self.logger.info("[WebServer] Web server closed")
