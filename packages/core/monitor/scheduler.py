"""
Monitoring scheduler.

Two periodic tasks share one inspector:
  - monitor: every 2s while ACTIVE, looks for a new violation
  - resolve: every 1s while WARNING, looks for the violation clearing

Neither task changes session state. They post SessionEvents to a queue and
a single dispatcher applies them to the state machine in order, then
starts/stops the tasks to match the resulting phase.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from .errors import StateViolation
from .evaluator import evaluate
from .inspector import EnvironmentInspector
from .periodic import PeriodicTask, Sleep
from .state_machine import SessionStateMachine
from .types import (
    EnvironmentSnapshot,
    Evaluation,
    SessionEvent,
    SessionEventType,
    SessionPhase,
)

log = logging.getLogger(__name__)


class MonitoringScheduler:
    def __init__(
        self,
        machine: SessionStateMachine,
        inspector: EnvironmentInspector,
        monitor_interval: float = 2.0,
        resolve_interval: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        evaluator: Callable[[EnvironmentSnapshot], Evaluation] = evaluate,
    ) -> None:
        self._machine = machine
        self._inspector = inspector
        self._evaluate_snapshot = evaluator
        self.monitor_task = PeriodicTask("monitor", monitor_interval, self._monitor_tick, sleep)
        self.resolve_task = PeriodicTask("resolve", resolve_interval, self._resolve_tick, sleep)
        self._queue: Optional[asyncio.Queue] = None
        self._dispatcher: Optional[asyncio.Task] = None
        self._side_tasks: Set[asyncio.Task] = set()
        self.last_snapshot: Optional[EnvironmentSnapshot] = None
        self.last_evaluation: Optional[Evaluation] = None

    # Lifecycle (call from inside the event loop)

    def start(self) -> None:
        if self._dispatcher is not None and not self._dispatcher.done():
            return
        self._queue = asyncio.Queue()
        self._dispatcher = asyncio.ensure_future(self._dispatch())

    async def shutdown(self) -> None:
        tasks = self.monitor_task.cancel() + self.resolve_task.cancel()
        for task in list(self._side_tasks):
            task.cancel()
            tasks.append(task)
        if self._dispatcher is not None and not self._dispatcher.done():
            self._dispatcher.cancel()
            tasks.append(self._dispatcher)
        self._dispatcher = None
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Monitoring stopped")

    # Inputs

    def submit(self, event: SessionEvent) -> None:
        if self._queue is None:
            raise RuntimeError("Scheduler not started")
        self._queue.put_nowait(event)

    def request_start(self) -> None:
        self.submit(SessionEvent(SessionEventType.START_REQUESTED))

    def request_end(self) -> None:
        self.submit(SessionEvent(SessionEventType.END_REQUESTED))

    def request_quit(self) -> None:
        self.submit(SessionEvent(SessionEventType.QUIT_REQUESTED))

    def warning_timer_expired(self) -> None:
        """The shell's countdown ran out: re-inspect, then let the machine decide."""
        task = asyncio.ensure_future(self._recheck_after_expiry())
        self._side_tasks.add(task)
        task.add_done_callback(self._side_tasks.discard)

    async def drain(self) -> None:
        """Wait until every queued event has been applied."""
        if self._queue is not None:
            await self._queue.join()

    async def inspect_once(self) -> Evaluation:
        return await self._inspect_and_evaluate()

    # Ticks

    async def _monitor_tick(self) -> None:
        state = self._machine.state
        if state.phase != SessionPhase.ACTIVE or state.showing_warning:
            return
        evaluation = await self._inspect_and_evaluate()
        self.submit(SessionEvent(SessionEventType.MONITOR_CHECKED, evaluation))

    async def _resolve_tick(self) -> None:
        evaluation = await self._inspect_and_evaluate()
        self.submit(SessionEvent(SessionEventType.RESOLVE_CHECKED, evaluation))

    async def _recheck_after_expiry(self) -> None:
        state = self._machine.state
        if state.phase != SessionPhase.WARNING:
            # Let the machine reject it so the drop is logged in one place
            self.submit(SessionEvent(SessionEventType.WARNING_EXPIRED))
            return
        warning_id = state.warnings_issued
        log.info("Warning timer expired, checking status...")
        try:
            evaluation: Optional[Evaluation] = await self._inspect_and_evaluate()
        except Exception:
            # No verdict terminates the session
            log.exception("Re-check after warning expiry failed")
            evaluation = None
        self.submit(SessionEvent(SessionEventType.WARNING_EXPIRED, evaluation, warning_id))

    async def _inspect_and_evaluate(self) -> Evaluation:
        snapshot = await self._inspector.inspect()
        evaluation = self._evaluate_snapshot(snapshot)
        self.last_snapshot = snapshot
        self.last_evaluation = evaluation
        return evaluation

    # Dispatch

    async def _dispatch(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                self._apply(event)
            finally:
                self._queue.task_done()

    def _apply(self, event: SessionEvent) -> None:
        try:
            self._machine.handle(event)
        except StateViolation as e:
            log.warning(f"Dropped event: {e}")
        except Exception:
            log.exception("Failed to apply %s", event.type.value)
        self._sync_tasks()

    def _sync_tasks(self) -> None:
        phase = self._machine.phase
        if phase in (SessionPhase.ACTIVE, SessionPhase.WARNING):
            if not self.monitor_task.running:
                log.info("Starting active monitoring...")
            self.monitor_task.start()
        else:
            self.monitor_task.cancel()

        if phase == SessionPhase.WARNING:
            self.resolve_task.start()
        else:
            self.resolve_task.cancel()
