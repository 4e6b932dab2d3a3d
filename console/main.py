"""
Drowsy - FastAPI Application
==============================
Creates the web console that lets a player wake the dormant game server
from a browser.

Responsibilities:
    - Create the FastAPI app instance
    - Render the home page (Jinja2) with the server name, favicon and
      login message passed through unchanged
    - Serve static assets (web/css, web/js) and, optionally, dynmap
    - Register the /wakeup and /status routes and the /ws endpoint
    - Wire the WakeDispatcher to the status oracle (the process container
      unless one is injected)
    - Drain in-flight wake requests and stop the server process on shutdown
"""

import inspect
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from console.config import DEFAULT_FAV_ICON, ConfigManager, resolve_dynmap_path
from console.dispatcher import StartCallback, WakeDispatcher
from console.routes import create_router
from console.websocket import WebSocketManager
from sleeper.container import ProcessContainer
from sleeper.logger import ConsoleLogger
from sleeper.status import StatusOracle


def create_app(
    project_dir: str | None = None,
    config: dict | None = None,
    oracle: StatusOracle | None = None,
    start_callback: StartCallback | None = None,
    logger: Any = None,
) -> FastAPI:
    """
    Application factory: create and configure the FastAPI instance.

    Args:
        project_dir:    Root directory of the Drowsy project.
                        If None, auto-detected from this file's location.
        config:         Full configuration dict. Loaded from config.yaml if None.
        oracle:         Status oracle to consult. Defaults to a ProcessContainer
                        built from the "process" config section.
        start_callback: Called with a requester label to start the server.
                        Defaults to the container's start().
        logger:         Logger with info/warn/error. Defaults to a ConsoleLogger
                        writing to data/logs.

    Returns:
        Configured FastAPI application ready to run with uvicorn.
    """
    # -- Resolve directories and configuration ---------------------------------
    if project_dir is None:
        project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if config is None:
        config = ConfigManager(project_dir).load()

    web_dir = os.path.join(project_dir, "web")
    templates_dir = os.path.join(web_dir, "templates")
    css_dir = os.path.join(web_dir, "css")
    js_dir = os.path.join(web_dir, "js")

    # -- Initialize managers ---------------------------------------------------
    ws_manager = WebSocketManager()
    if logger is None:
        logger = ConsoleLogger(os.path.join(project_dir, "data", "logs"), ws_manager)
    if config.get("_config_error"):
        logger.warn(f"[Config] Using defaults, config.yaml is invalid: {config['_config_error']}")

    if oracle is None:
        oracle = ProcessContainer(config["process"], logger, ws_manager, base_dir=project_dir)
    if start_callback is None:
        start_callback = getattr(oracle, "start")

    dispatcher = WakeDispatcher(
        oracle=oracle,
        start_callback=start_callback,
        logger=logger,
        dynmap=config["web"].get("serve_dynmap") or False,
        requester_label=config["server"].get("requester_label", "A WebUser"),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await dispatcher.drain()
        close = getattr(oracle, "close", None)
        if close is not None:
            result = close()
            if inspect.isawaitable(result):
                await result

    # -- Create FastAPI app ----------------------------------------------------
    app = FastAPI(
        title="Drowsy",
        description="Web console for an on-demand game server",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    templates = Jinja2Templates(directory=templates_dir)

    # -- Store managers on app state -------------------------------------------
    app.state.config = config
    app.state.ws_manager = ws_manager
    app.state.logger = logger
    app.state.oracle = oracle
    app.state.dispatcher = dispatcher
    app.state.templates = templates

    # -- Register API routes ---------------------------------------------------
    app.include_router(create_router(dispatcher))

    # -- WebSocket endpoint ----------------------------------------------------
    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Live log lines and status changes for the home page."""
        await ws_manager.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            ws_manager.disconnect(websocket)

    # -- Mount static assets ---------------------------------------------------
    if os.path.isdir(css_dir):
        app.mount("/css", StaticFiles(directory=css_dir), name="css")
    if os.path.isdir(js_dir):
        app.mount("/js", StaticFiles(directory=js_dir), name="js")

    dynmap_path = resolve_dynmap_path(config, project_dir)
    if dynmap_path:
        logger.info(f"[WebServer] Serving dynmap: {dynmap_path}")
        if os.path.isdir(dynmap_path):
            app.mount("/dynmap", StaticFiles(directory=dynmap_path, html=True), name="dynmap")

    # -- Page routes -----------------------------------------------------------
    @app.get("/")
    async def home_page(request: Request):
        """Home page: server name, login message and the wake button."""
        return templates.TemplateResponse(
            request,
            "home.html",
            {
                "title": config["server"].get("name"),
                "fav_icon": config["web"].get("fav_icon") or DEFAULT_FAV_ICON,
                "message": config["server"].get("login_message"),
            },
        )

    return app
