"""
Drowsy - Wake Dispatcher
==========================
Decides what a "wake" click from the browser should do, based on the state
the server is in right now.

    Sleeping -> start the server   (StartTriggered)
    Running  -> stop the server    (StopTriggered)
    Starting -> leave it alone     (Ignored)
    other    -> warn, do nothing   (Unrecognized)

The HTTP layer calls dispatch(), which schedules the decision as a detached
task and returns at once: the browser is told "received", never whether the
action worked. Anything that goes wrong afterwards can only be logged.

The dispatcher keeps no state between requests. Two wake-ups that both see
Sleeping both trigger a start; debouncing belongs to the start callback.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable

from sleeper.status import ServerStatus, StatusOracle, normalize_status, status_value


class WakeOutcome(str, Enum):
    """Result of one wake request."""

    START_TRIGGERED = "StartTriggered"
    STOP_TRIGGERED = "StopTriggered"
    IGNORED = "Ignored"
    UNRECOGNIZED = "Unrecognized"


class OracleFetchError(RuntimeError):
    """Raised when the current server status could not be read."""


_OUTCOMES: dict[ServerStatus, WakeOutcome] = {
    ServerStatus.SLEEPING: WakeOutcome.START_TRIGGERED,
    ServerStatus.RUNNING: WakeOutcome.STOP_TRIGGERED,
    ServerStatus.STARTING: WakeOutcome.IGNORED,
}


def resolve_outcome(status: Any) -> WakeOutcome:
    """Map a (possibly unknown) server status to the wake outcome."""
    return _OUTCOMES.get(normalize_status(status), WakeOutcome.UNRECOGNIZED)


StartCallback = Callable[[str], Awaitable[None] | None]


class WakeDispatcher:
    """
    Status-driven handler for wake requests and status queries.

    Attributes:
        oracle:          Source of the current server status and the kill command.
        start_callback:  Called with requester_label to start a sleeping server.
        logger:          Anything with info/warn/error methods.
        dynmap:          Opaque dynmap setting echoed by query_status().
        requester_label: Label handed to start_callback.
    """

    def __init__(
        self,
        oracle: StatusOracle,
        start_callback: StartCallback,
        logger: Any,
        dynmap: Any = False,
        requester_label: str = "A WebUser",
    ):
        self.oracle = oracle
        self.start_callback = start_callback
        self.logger = logger
        self.dynmap = dynmap
        self.requester_label = requester_label
        self._pending: set[asyncio.Task] = set()

    # -- Wake -----------------------------------------------------------------

    async def handle_wake_request(self, caller_id: str) -> WakeOutcome:
        """
        Read the server status once and act on it.

        The start/stop command runs as a detached task; its failure is
        logged, not raised.

        Args:
            caller_id: Who asked (remote address), used only for logging.

        Returns:
            The WakeOutcome for the observed status.

        Raises:
            Exception: Whatever the oracle raised while fetching the status.
        """
        status = await self.oracle.get_status()
        outcome = resolve_outcome(status)
        prefix = f"[WebServer]({caller_id})"

        if outcome is WakeOutcome.START_TRIGGERED:
            self._log("info", f"{prefix} Wake up server was {status}")
            self._fire("start", self.start_callback, self.requester_label)
        elif outcome is WakeOutcome.STOP_TRIGGERED:
            self._log("info", f"{prefix} Stopping server was {status}")
            self._fire("stop", self.oracle.kill_minecraft)
        elif outcome is WakeOutcome.IGNORED:
            self._log("info", f"{prefix} Doing nothing server was {status}")
        else:
            self._log("warn", f"{prefix} Server is ?! {status}")

        return outcome

    def dispatch(self, caller_id: str) -> asyncio.Task:
        """
        Schedule handle_wake_request() and return without waiting for it.

        Must be called from inside a running event loop.

        Args:
            caller_id: Who asked (remote address).

        Returns:
            The detached task, for callers that want to observe it.
        """
        return self._detach(
            self.handle_wake_request(caller_id),
            f"[WebServer]({caller_id}) Wake request failed",
        )

    # -- Status ---------------------------------------------------------------

    async def query_status(self) -> dict[str, Any]:
        """
        Return the current status and the dynmap setting, both unchanged.

        Raises:
            OracleFetchError: If the status could not be read.
        """
        try:
            status = await self.oracle.get_status()
        except Exception as e:
            raise OracleFetchError(f"Failed to read server status: {e}") from e
        return {"status": status_value(status), "dynmap": self.dynmap}

    # -- Task bookkeeping -----------------------------------------------------

    async def drain(self) -> None:
        """Wait for every detached task still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        """Number of detached tasks that have not finished yet."""
        return len(self._pending)

    def _fire(self, name: str, command: Callable[..., Any], *args: Any) -> None:
        """Run a start/stop command without waiting for its result."""
        failure = f"[WebServer] {name.capitalize()} command failed"
        try:
            result = command(*args)
        except Exception as e:
            self._log("error", f"{failure}: {e}")
            return
        if inspect.isawaitable(result):
            self._detach(result, failure)

    def _detach(self, awaitable: Awaitable[Any], failure: str) -> asyncio.Task:
        task = asyncio.ensure_future(awaitable)
        self._pending.add(task)

        def _done(t: asyncio.Task) -> None:
            self._pending.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                self._log("error", f"{failure}: {exc}")

        task.add_done_callback(_done)
        return task

    def _log(self, level: str, text: str) -> None:
        try:
            getattr(self.logger, level)(text)
        except Exception:
            pass
