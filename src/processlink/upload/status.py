"""Ephemeral upload status with automatic expiry.

:class:`StatusReporter` owns a single "current status" slot.  Every phase
transition overwrites it and notifies the observer.  Terminal phases
schedule a delayed reset to idle::

    IDLE -> VALIDATING -> ERROR                        (config / payload)
                       -> UPLOADING -> SUCCESS         (clears after 5 s)
                                    -> ERROR | TIMEOUT (clears after 10 s)

Pending resets are never cancelled by later transitions.  When one fires
after the slot has been overwritten again it has no effect, so a status
from a newer upload is never wiped by an older upload's timer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from processlink.models import IDLE_STATUS, StatusEvent, StatusPhase
from processlink.observability import get_logger

log = get_logger("processlink.status")

SUCCESS_CLEAR_DELAY = 5.0
FAILURE_CLEAR_DELAY = 10.0


@runtime_checkable
class StatusObserver(Protocol):
    """Receives every status change.  Plain functions satisfy this."""

    def __call__(self, event: StatusEvent) -> None: ...


class Scheduler(Protocol):
    """Delayed-task capability.  :class:`asyncio.AbstractEventLoop` satisfies
    it; the returned handle must expose ``cancel()``.
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any: ...


class StatusReporter:
    """Tracks and publishes the current upload status.

    Parameters
    ----------
    observer:
        Called with each new :class:`StatusEvent`.  Optional.
    scheduler:
        Used to schedule the automatic reset.  Defaults to the running
        asyncio event loop at the time a terminal phase is reported.
    """

    def __init__(
        self,
        observer: StatusObserver | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._observer = observer
        self._scheduler = scheduler
        self._current: StatusEvent = IDLE_STATUS
        self._generation = 0
        self._pending: set[Any] = set()

    @property
    def current(self) -> StatusEvent:
        return self._current

    # -- core --------------------------------------------------------------

    def report(
        self,
        phase: StatusPhase,
        label: str = "",
        *,
        fill: str | None = None,
        shape: str | None = None,
    ) -> StatusEvent:
        """Overwrite the status slot and notify the observer."""
        event = StatusEvent(phase=phase, label=label, fill=fill, shape=shape)
        self._publish(event)
        if phase is StatusPhase.SUCCESS:
            self._schedule_clear(SUCCESS_CLEAR_DELAY)
        elif phase.is_terminal:
            self._schedule_clear(FAILURE_CLEAR_DELAY)
        return event

    def clear(self) -> None:
        """Reset the status to idle."""
        self._publish(IDLE_STATUS)

    def close(self) -> None:
        """Cancel every pending reset and return to idle."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
        self.clear()

    def _publish(self, event: StatusEvent) -> None:
        self._generation += 1
        self._current = event
        if self._observer is not None:
            self._observer(event)

    def _schedule_clear(self, delay: float) -> None:
        scheduler = self._scheduler or asyncio.get_running_loop()
        generation = self._generation
        holder: list[Any] = []
        handle = scheduler.call_later(delay, self._expire, generation, holder)
        holder.append(handle)
        self._pending.add(handle)

    def _expire(self, generation: int, holder: list[Any]) -> None:
        for handle in holder:
            self._pending.discard(handle)
        if generation != self._generation:
            log.debug(
                "Status reset superseded",
                extra={"extra_fields": {"op": "status_clear", "phase": self._current.phase.value}},
            )
            return
        self.clear()

    # -- phase helpers -----------------------------------------------------

    def validating(self) -> StatusEvent:
        return self.report(StatusPhase.VALIDATING, "validating...", fill="yellow", shape="ring")

    def invalid(self, label: str) -> StatusEvent:
        """Validation failure: ``"no config"``, ``"no site ID"``, ..."""
        return self.report(StatusPhase.ERROR, label, fill="red", shape="ring")

    def uploading(self) -> StatusEvent:
        return self.report(StatusPhase.UPLOADING, "uploading...", fill="yellow", shape="dot")

    def uploaded(self, file_id: Any) -> StatusEvent:
        short = "" if file_id is None else str(file_id)[:8]
        return self.report(StatusPhase.SUCCESS, f"uploaded: {short}...", fill="green", shape="dot")

    def api_error(self, message: str) -> StatusEvent:
        return self.report(StatusPhase.ERROR, message, fill="red", shape="dot")

    def request_failed(self) -> StatusEvent:
        return self.report(StatusPhase.ERROR, "request failed", fill="red", shape="ring")

    def timed_out(self) -> StatusEvent:
        return self.report(StatusPhase.TIMEOUT, "timeout", fill="red", shape="ring")
