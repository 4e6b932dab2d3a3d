"""
Drowsy - Console Package
==========================
The web console players use to wake the dormant game server.

Architecture:
    main.py       -> FastAPI app creation, pages, static files, dynmap, /ws
    routes.py     -> POST /wakeup and GET /status
    dispatcher.py -> WakeDispatcher: server status -> start / stop / ignore / warn
    config.py     -> Read config.yaml, defaults, environment overrides
    websocket.py  -> Live log and status frames pushed to open home pages
    listener.py   -> Owned uvicorn server handle (init / serve / close)
"""
