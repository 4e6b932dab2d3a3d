"""Shared test doubles for the console and sleeper packages."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest


class RecordingLogger:

    def __init__(self):
        self.lines: list[tuple[str, str]] = []

    def info(self, text: str) -> None:
        self.lines.append(("info", text))

    def warn(self, text: str) -> None:
        self.lines.append(("warn", text))

    def error(self, text: str) -> None:
        self.lines.append(("error", text))

    def at(self, level: str) -> list[str]:
        return [text for lvl, text in self.lines if lvl == level]


class StubOracle:
    """Status oracle with a fixed status and call counters."""

    def __init__(self, status: Any = "Sleeping", delay: float = 0.0, fail: Exception | None = None):
        self.status = status
        self.delay = delay
        self.fail = fail
        self.fetches = 0
        self.kills = 0
        self.resolved: list[str] = []
        self.killed = threading.Event()

    async def get_status(self) -> Any:
        self.fetches += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        self.resolved.append("resolved")
        return self.status

    async def kill_minecraft(self) -> None:
        self.kills += 1
        self.killed.set()


class StartRecorder:
    """Async start callback that records requester labels."""

    def __init__(self, fail: Exception | None = None):
        self.labels: list[str] = []
        self.fail = fail
        self.called = threading.Event()

    async def __call__(self, label: str) -> None:
        self.labels.append(label)
        self.called.set()
        if self.fail is not None:
            raise self.fail


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def start() -> StartRecorder:
    return StartRecorder()
