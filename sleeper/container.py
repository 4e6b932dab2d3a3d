"""
Drowsy - Process Container
============================
Owns the game server child process and reports its lifecycle state.

The container is the status oracle the web console talks to. It spawns the
configured server command on demand, watches its output to tell when the
server is ready, and stops it again when asked.

States (see status.py):
    Sleeping -> start()          -> Starting
    Starting -> ready line seen  -> Running   (immediately if no ready_pattern)
    Running  -> kill_minecraft() -> process exits -> Sleeping
    any      -> process exits    -> Sleeping

Usage:
    container = ProcessContainer(config["process"], logger, ws_manager)
    await container.start("A WebUser")   # spawn the server
    await container.get_status()         # ServerStatus.STARTING
    await container.kill_minecraft()     # stop it again
"""

import asyncio
import os
import re
import shlex
from datetime import datetime, timezone
from typing import Any

from sleeper.logger import ConsoleLogger
from sleeper.status import ServerStatus


class ProcessContainer:
    """
    Lifecycle manager for the game server process.

    Repeated start requests while the server is not Sleeping are ignored,
    so concurrent wake-ups never spawn two servers.

    Attributes:
        command:       Shell-style command line used to launch the server.
        cwd:           Working directory for the server process.
        ready_pattern: Compiled regex marking the server as ready (or None).
        stop_command:  Line written to the server's stdin to stop it gracefully.
        stop_timeout:  Seconds to wait for a graceful stop before killing.
        state:         Current ServerStatus.
        requested_by:  Label of whoever triggered the last start.
        start_time:    ISO timestamp of the last start.
    """

    def __init__(
        self,
        process_config: dict,
        logger: ConsoleLogger,
        ws_manager: Any = None,
        base_dir: str | None = None,
    ):
        """
        Initialize the container.

        Args:
            process_config: The "process" section of the configuration.
            logger:         Logger for lifecycle events and server output.
            ws_manager:     WebSocket manager for status broadcasts (optional).
            base_dir:       Directory a relative cwd is resolved against
                            (the project directory; defaults to the working directory).
        """
        self.command: str = process_config.get("command") or ""
        cwd = process_config.get("cwd") or None
        if cwd and base_dir and not os.path.isabs(cwd):
            cwd = os.path.normpath(os.path.join(base_dir, cwd))
        self.cwd: str | None = cwd
        pattern = process_config.get("ready_pattern")
        self.ready_pattern = re.compile(pattern) if pattern else None
        self.stop_command: str = process_config.get("stop_command") or ""
        self.stop_timeout = float(process_config.get("stop_timeout", 30))

        self.logger = logger
        self.ws = ws_manager
        self.state = ServerStatus.SLEEPING
        self.requested_by: str | None = None
        self.start_time: str | None = None

        self._process: asyncio.subprocess.Process | None = None
        self._reader: asyncio.Task | None = None

    @property
    def is_alive(self) -> bool:
        """Check if the server process exists and has not exited."""
        return self._process is not None and self._process.returncode is None

    async def get_status(self) -> ServerStatus:
        """Return the current lifecycle state."""
        return self.state

    async def _set_state(self, state: ServerStatus, message: str = "") -> None:
        self.state = state
        if self.ws:
            await self.ws.send_status(state.value, message)

    async def start(self, requester: str) -> None:
        """
        Start the server process on behalf of a requester.

        Args:
            requester: Human-readable label of whoever asked for the start.

        Raises:
            RuntimeError: If no server command is configured.
            OSError:      If the process could not be spawned.
        """
        if self.state != ServerStatus.SLEEPING:
            self.logger.info(
                f"[Container] Start requested by {requester} ignored, server is {self.state}"
            )
            return

        args = shlex.split(self.command)
        if not args:
            self.logger.error("[Container] No server command configured")
            raise RuntimeError("No server command configured")

        self.requested_by = requester
        self.start_time = datetime.now(timezone.utc).isoformat()
        self.logger.info(f"[Container] Starting server for {requester}: {self.command}")
        await self._set_state(ServerStatus.STARTING, f"Server starting for {requester}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=self.cwd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            self.logger.error(f"[Container] Failed to start server: {e}")
            await self._set_state(ServerStatus.SLEEPING, "Server failed to start")
            raise

        self._process = process
        if self.ready_pattern is None:
            await self._set_state(ServerStatus.RUNNING, "Server started")
        self._reader = asyncio.create_task(self._pump_output(process))

    async def _pump_output(self, process: asyncio.subprocess.Process) -> None:
        """
        Forward server output to the logger until the process exits.

        Flips Starting -> Running on the first line matching ready_pattern,
        and back to Sleeping once the process is gone. Lines longer than the
        stream buffer are dropped with a warning so the pipe keeps draining.
        """
        try:
            while process.stdout is not None:
                try:
                    raw = await process.stdout.readline()
                except ValueError:
                    self.logger.warn("[Container] Dropped an oversized server output line")
                    continue
                if not raw:
                    break
                line = raw.decode("utf-8", errors="replace").rstrip()
                if not line:
                    continue
                self.logger.info(f"[Server] {line}")
                if (
                    self.state == ServerStatus.STARTING
                    and self.ready_pattern is not None
                    and self.ready_pattern.search(line)
                ):
                    await self._set_state(ServerStatus.RUNNING, "Server is ready")
        finally:
            code = await process.wait()
            self.logger.info(f"[Container] Server process exited with code {code}")
            if self._process is process:
                self._process = None
            await self._set_state(ServerStatus.SLEEPING, "Server stopped")

    async def kill_minecraft(self) -> None:
        """
        Stop the server process.

        Sends stop_command on stdin when configured, otherwise terminates
        the process. Falls back to a hard kill after stop_timeout seconds.
        Does nothing when no process is running.
        """
        process = self._process
        if process is None or process.returncode is not None:
            self.logger.info("[Container] Stop requested but no server process is running")
            return

        self.logger.info(f"[Container] Stopping server (pid {process.pid})")
        try:
            if self.stop_command and process.stdin is not None:
                process.stdin.write((self.stop_command + "\n").encode("utf-8"))
                await process.stdin.drain()
            else:
                process.terminate()
        except (BrokenPipeError, ConnectionResetError, ProcessLookupError):
            pass

        try:
            await asyncio.wait_for(process.wait(), timeout=self.stop_timeout)
        except asyncio.TimeoutError:
            self.logger.warn(
                f"[Container] Server did not stop within {self.stop_timeout:.0f}s, killing it"
            )
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

        if self._reader is not None:
            await self._reader
            self._reader = None

    async def close(self) -> None:
        """Stop any live server process. Safe to call more than once."""
        if self.is_alive:
            await self.kill_minecraft()
