"""
Drowsy - Server Status
========================
Lifecycle states of the managed game server and the narrow interface
through which the web console reads them.

States:
    - "Sleeping" : Dormant, no process running
    - "Starting" : Process spawned, not yet serving players
    - "Running"  : Fully up

The cycle is Sleeping -> Starting -> Running -> Sleeping and repeats for the
lifetime of the console. Values outside these three can still come back
from an oracle; normalize_status() keeps them as-is so callers can handle
them explicitly.
"""

from enum import Enum
from typing import Any, Protocol


class ServerStatus(str, Enum):
    """Known lifecycle states of the managed server."""

    SLEEPING = "Sleeping"
    STARTING = "Starting"
    RUNNING = "Running"

    def __str__(self) -> str:
        return self.value


class StatusOracle(Protocol):
    """
    Ground truth for the server lifecycle.

    get_status() may return a value outside ServerStatus; consumers must
    not assume the set is closed.
    """

    async def get_status(self) -> Any: ...

    async def kill_minecraft(self) -> None: ...


def normalize_status(value: Any) -> ServerStatus | Any:
    """
    Map a raw oracle value onto ServerStatus.

    Returns the matching ServerStatus member, or the raw value unchanged
    when it is not one of the known states.
    """
    if isinstance(value, ServerStatus):
        return value
    try:
        return ServerStatus(value)
    except ValueError:
        return value


def status_value(value: Any) -> Any:
    """Return the wire representation of a (possibly unknown) status."""
    if isinstance(value, ServerStatus):
        return value.value
    return value
