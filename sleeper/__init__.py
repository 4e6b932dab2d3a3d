"""
Drowsy - Sleeper Package
==========================
The managed game server side of Drowsy.

This package owns everything that knows about the dormant process itself:
    - status.py    : ServerStatus states and the StatusOracle interface
    - container.py : ProcessContainer, the child process lifecycle (start/kill/status)
    - logger.py    : ConsoleLogger, dual-output logging (file + terminal + WebSocket)

Usage:
    from sleeper import ConsoleLogger, ProcessContainer

    logger = ConsoleLogger(log_dir, ws_manager)
    container = ProcessContainer(config["process"], logger, ws_manager)
    await container.start("A WebUser")
"""

from sleeper.container import ProcessContainer
from sleeper.logger import ConsoleLogger
from sleeper.status import ServerStatus, StatusOracle

__all__ = ["ConsoleLogger", "ProcessContainer", "ServerStatus", "StatusOracle"]
