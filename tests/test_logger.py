from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from sleeper.logger import ConsoleLogger


class CollectingWS:

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    async def send_log(self, text: str, level: str = "info") -> None:
        self.messages.append((text, level))


def _log_lines(log_dir: Path) -> list[str]:
    files = list(log_dir.glob("*.log"))
    assert len(files) == 1
    return files[0].read_text(encoding="utf-8").splitlines()


def test_lines_go_to_file_and_terminal(tmp_path: Path, capsys) -> None:
    logger = ConsoleLogger(str(tmp_path / "logs"))

    logger.info("[WebServer] Starting web server on *: 8000")
    logger.warn("Server is ?! Paused")
    logger.error("Start command failed")

    lines = _log_lines(tmp_path / "logs")
    assert lines[0].endswith("] [WebServer] Starting web server on *: 8000")
    assert lines[1].endswith("] [WARN] Server is ?! Paused")
    assert lines[2].endswith("] [ERROR] Start command failed")
    assert capsys.readouterr().out.splitlines() == lines


def test_write_failure_is_swallowed(tmp_path: Path) -> None:
    logger = ConsoleLogger(str(tmp_path / "logs"))
    logger.log_dir = str(tmp_path / "missing" / "dir")

    logger.warn("still fine")


def test_no_broadcast_outside_event_loop(tmp_path: Path) -> None:
    ws = CollectingWS()
    logger = ConsoleLogger(str(tmp_path), ws)

    logger.info("hello")

    assert ws.messages == []


@pytest.mark.asyncio
async def test_broadcasts_inside_event_loop(tmp_path: Path) -> None:
    ws = CollectingWS()
    logger = ConsoleLogger(str(tmp_path), ws)

    logger.warn("Server is ?! Paused")
    await asyncio.sleep(0)

    assert len(ws.messages) == 1
    text, level = ws.messages[0]
    assert level == "warn"
    assert text.endswith("[WARN] Server is ?! Paused")
