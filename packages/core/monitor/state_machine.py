"""
Session state machine: IDLE -> ACTIVE <-> WARNING -> TERMINATED

ACTIVE/WARNING can also leave to ENDED when the candidate ends the session.
TERMINATED is final for the lifetime of the process.

Only the scheduler's dispatcher calls handle(); probes and ticks never
touch SessionState directly.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from .errors import StateViolation
from .shell import PresentationShell
from .types import (
    Evaluation,
    SessionEvent,
    SessionEventType,
    SessionPhase,
    SessionState,
)

log = logging.getLogger(__name__)


class SessionStateMachine:
    def __init__(self, shell: PresentationShell) -> None:
        self._shell = shell
        self._state = SessionState()
        self._lock = threading.RLock()
        self._handlers: Dict[SessionEventType, Callable[[SessionEvent], None]] = {
            SessionEventType.START_REQUESTED: self._on_start,
            SessionEventType.MONITOR_CHECKED: self._on_monitor_checked,
            SessionEventType.RESOLVE_CHECKED: self._on_resolve_checked,
            SessionEventType.WARNING_EXPIRED: self._on_warning_expired,
            SessionEventType.END_REQUESTED: self._on_end,
            SessionEventType.QUIT_REQUESTED: self._on_quit,
        }

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state.snapshot()

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            return self._state.phase

    def handle(self, event: SessionEvent) -> SessionPhase:
        """
        Apply one event. Raises StateViolation when the event cannot be
        accepted in the current phase; the state is left untouched then.
        """
        with self._lock:
            before = self._state.phase
            self._handlers[event.type](event)
            after = self._state.phase
            if after != before:
                log.info("Session %s -> %s (%s)", before.value, after.value, event.type.value)
            return after

    # Warning surface

    def open_warning(self, evaluation: Evaluation) -> bool:
        """
        Show the warning prompt for the headline violation.
        Dropped silently if a warning is already up or the session is over.
        """
        with self._lock:
            st = self._state
            if st.showing_warning or st.terminated or evaluation.clean:
                return False
            st.showing_warning = True
            st.active_violation = evaluation.violations[0]
            st.phase = SessionPhase.WARNING
            st.warnings_issued += 1
            log.info("Issue detected: %s", evaluation.headline)
            self._shell.show_warning(evaluation.headline or "")
            return True

    def close_warning(self) -> bool:
        with self._lock:
            st = self._state
            if not st.showing_warning:
                return False
            st.showing_warning = False
            st.active_violation = None
            self._shell.close_warning()
            return True

    # Handlers

    def _reject(self, event: SessionEvent) -> None:
        raise StateViolation(event.type.value, self._state.phase.value)

    def _on_start(self, event: SessionEvent) -> None:
        st = self._state
        if st.started or st.phase != SessionPhase.IDLE:
            self._reject(event)
        st.started = True
        st.phase = SessionPhase.ACTIVE
        self._shell.lock_window()
        self._shell.enter_kiosk()

    def _on_monitor_checked(self, event: SessionEvent) -> None:
        st = self._state
        # A tick that started before the phase changed is stale, not an error
        if st.phase != SessionPhase.ACTIVE or st.showing_warning or st.terminated:
            log.debug("Ignoring monitor result in phase %s", st.phase.value)
            return
        if event.evaluation is None or event.evaluation.clean:
            return
        self.open_warning(event.evaluation)

    def _on_resolve_checked(self, event: SessionEvent) -> None:
        st = self._state
        if st.phase != SessionPhase.WARNING or st.terminated:
            log.debug("Ignoring resolve result in phase %s", st.phase.value)
            return
        if event.evaluation is None or not event.evaluation.clean:
            return
        log.info("Issue resolved during warning period")
        self._resume()

    def _on_warning_expired(self, event: SessionEvent) -> None:
        st = self._state
        if st.terminated or st.phase != SessionPhase.WARNING:
            self._reject(event)
        if event.warning_id is not None and event.warning_id != st.warnings_issued:
            # Countdown of an earlier warning; the current one keeps its grace period
            self._reject(event)
        if event.evaluation is not None and event.evaluation.clean:
            log.info("Warning expired with the issue resolved")
            self._resume()
        else:
            self._terminate(event.evaluation)

    def _on_end(self, event: SessionEvent) -> None:
        st = self._state
        if st.phase not in (SessionPhase.ACTIVE, SessionPhase.WARNING):
            self._reject(event)
        self.close_warning()
        st.phase = SessionPhase.ENDED
        self._shell.exit_kiosk()
        self._shell.unlock_for_exit()
        self._shell.quit()

    def _on_quit(self, event: SessionEvent) -> None:
        # A live session can only be left through END_REQUESTED
        if self._state.phase in (SessionPhase.ACTIVE, SessionPhase.WARNING):
            self._reject(event)
        self._shell.quit()

    def _resume(self) -> None:
        self.close_warning()
        self._state.phase = SessionPhase.ACTIVE

    def _terminate(self, evaluation: Optional[Evaluation]) -> None:
        st = self._state
        reason = evaluation.headline if evaluation is not None else "no verdict"
        log.warning("Terminating session: %s", reason)
        st.terminated = True
        self.close_warning()
        st.phase = SessionPhase.TERMINATED
        self._shell.exit_kiosk()
        self._shell.unlock_for_exit()
        self._shell.show_terminated()
