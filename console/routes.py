"""
Drowsy - HTTP API Routes
==========================
The two endpoints the browser page talks to.

    POST /wakeup - Toggle the server: start it if sleeping, stop it if running.
                   Always answers "received" right away.
    GET  /status - Current server status plus the dynmap setting.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from console.dispatcher import OracleFetchError, WakeDispatcher


class StatusResponse(BaseModel):
    """Server status as shown on the home page."""
    status: Any = Field(description="Server state, e.g. Sleeping / Starting / Running")
    dynmap: Any = Field(default=False, description="Dynmap setting, passed through unchanged")


def create_router(dispatcher: WakeDispatcher) -> APIRouter:
    """
    Create the API router.

    Args:
        dispatcher: Handles wake requests and status queries.

    Returns:
        Configured APIRouter with /wakeup and /status registered.
    """
    router = APIRouter()

    @router.post("/wakeup", response_class=PlainTextResponse)
    async def wakeup(request: Request):
        """
        Ask the server to wake up (or go back to sleep).

        The decision runs in the background; the answer never reflects
        whether the start/stop actually worked.
        """
        caller = request.client.host if request.client else "unknown"
        dispatcher.dispatch(caller)
        return PlainTextResponse("received")

    @router.get("/status", response_model=StatusResponse)
    async def status():
        """Get the current server status and dynmap setting."""
        try:
            return await dispatcher.query_status()
        except OracleFetchError as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
