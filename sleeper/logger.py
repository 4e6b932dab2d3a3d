"""
Drowsy - Console Logger
=========================
Dual-output logger shared by the web console and the process container.

Every line goes to three places:
    1. A per-day log file: data/logs/YYYY-MM-DD.log
    2. The terminal (stdout)
    3. All connected browser dashboards, via the WebSocket manager

Logging must never get in the way of a request: file errors and broadcast
failures are swallowed here.
"""

import asyncio
import os
from datetime import datetime
from typing import Any


class ConsoleLogger:
    """
    Timestamped logger writing to file, terminal and WebSocket.

    Attributes:
        log_dir:    Directory for log files (data/logs/).
        ws_manager: WebSocket manager for broadcasting (may be None).
    """

    def __init__(self, log_dir: str, ws_manager: Any = None):
        """
        Initialize the logger.

        Args:
            log_dir:    Directory path for log files.
            ws_manager: WebSocket manager instance (optional).
        """
        self.log_dir = log_dir
        self.ws_manager = ws_manager
        self._tasks: set[asyncio.Task] = set()

        os.makedirs(log_dir, exist_ok=True)

    def _get_log_path(self) -> str:
        """Get today's log file path."""
        today = datetime.now().strftime("%Y-%m-%d")
        return os.path.join(self.log_dir, f"{today}.log")

    def _timestamp(self) -> str:
        """Get current time formatted for log entries."""
        return datetime.now().strftime("%H:%M:%S")

    def _write(self, text: str) -> None:
        """Append a line to today's log file."""
        try:
            with open(self._get_log_path(), "a", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError:
            pass

    def _broadcast(self, line: str, level: str) -> None:
        """
        Schedule a WebSocket push of one line without waiting for it.

        Only works from inside a running event loop; called from plain
        code (CLI startup, tests without a loop) the line is simply not
        pushed to browsers.

        Args:
            line:  The formatted log line.
            level: "info", "warn" or "error".
        """
        if not self.ws_manager:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        task = loop.create_task(self.ws_manager.send_log(line, level))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _emit(self, level: str, text: str) -> str:
        ts = self._timestamp()
        tag = "" if level == "info" else f"[{level.upper()}] "
        line = f"[{ts}] {tag}{text}"
        self._write(line)
        print(line, flush=True)
        self._broadcast(line, level)
        return line

    def info(self, text: str) -> None:
        """Log an informational message."""
        self._emit("info", text)

    def warn(self, text: str) -> None:
        """Log a warning, e.g. an unexpected server state."""
        self._emit("warn", text)

    def error(self, text: str) -> None:
        """Log an error that could not be reported to anyone else."""
        self._emit("error", text)
