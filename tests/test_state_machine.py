"""
Tests for the session state machine: phase transitions, the window
commands each transition issues, and the events each phase rejects.
"""
import pytest

from packages.core.monitor.errors import StateViolation
from packages.core.monitor.evaluator import evaluate
from packages.core.monitor.state_machine import SessionStateMachine
from packages.core.monitor.types import SessionEvent, SessionEventType, SessionPhase, ViolationKind

from conftest import make_snapshot

CLEAN = evaluate(make_snapshot())
CAMERA_OFF = evaluate(make_snapshot(camera_active=False))
USB = evaluate(make_snapshot(usb_count=1))


def event(kind, evaluation=None):
    return SessionEvent(SessionEventType[kind], evaluation)


@pytest.fixture
def machine(shell):
    return SessionStateMachine(shell)


@pytest.fixture
def active(machine):
    machine.handle(event("START_REQUESTED"))
    return machine


@pytest.fixture
def warning(active):
    active.handle(event("MONITOR_CHECKED", CAMERA_OFF))
    return active


class TestStart:
    def test_initial_state(self, machine):
        state = machine.state

        assert state.phase == SessionPhase.IDLE
        assert not state.started
        assert not state.terminated
        assert not state.showing_warning

    def test_start_locks_and_enters_kiosk(self, machine, shell):
        assert machine.handle(event("START_REQUESTED")) == SessionPhase.ACTIVE
        assert shell.names() == ["lock_window", "enter_kiosk"]
        assert machine.state.started

    def test_second_start_rejected(self, active, shell):
        with pytest.raises(StateViolation):
            active.handle(event("START_REQUESTED"))

        assert active.phase == SessionPhase.ACTIVE
        assert shell.count("lock_window") == 1

    def test_results_before_start_ignored(self, machine, shell):
        machine.handle(event("MONITOR_CHECKED", CAMERA_OFF))
        machine.handle(event("RESOLVE_CHECKED", CLEAN))

        assert machine.phase == SessionPhase.IDLE
        assert shell.calls == []


class TestWarning:
    """ACTIVE <-> WARNING"""

    def test_violation_opens_warning(self, warning, shell):
        state = warning.state

        assert state.phase == SessionPhase.WARNING
        assert state.showing_warning
        assert state.active_violation.kind == ViolationKind.CAMERA_INACTIVE
        assert state.warnings_issued == 1
        assert shell.calls[-1] == ("show_warning", "Camera has been turned off")

    def test_clean_monitor_result_keeps_active(self, active, shell):
        active.handle(event("MONITOR_CHECKED", CLEAN))

        assert active.phase == SessionPhase.ACTIVE
        assert shell.count("show_warning") == 0

    def test_warning_is_not_reopened(self, warning, shell):
        """A second violation while the prompt is up changes nothing"""
        warning.handle(event("MONITOR_CHECKED", USB))

        assert warning.open_warning(USB) is False
        assert shell.count("show_warning") == 1
        assert warning.state.active_violation.kind == ViolationKind.CAMERA_INACTIVE

    def test_open_warning_ignores_clean_evaluation(self, active, shell):
        assert active.open_warning(CLEAN) is False
        assert active.phase == SessionPhase.ACTIVE

    def test_resolve_clean_resumes(self, warning, shell):
        assert warning.handle(event("RESOLVE_CHECKED", CLEAN)) == SessionPhase.ACTIVE

        state = warning.state
        assert not state.showing_warning
        assert state.active_violation is None
        assert shell.calls[-1] == ("close_warning",)

    def test_resolve_still_violating_stays(self, warning, shell):
        warning.handle(event("RESOLVE_CHECKED", USB))

        assert warning.phase == SessionPhase.WARNING
        assert shell.count("close_warning") == 0

    def test_close_warning_idempotent(self, warning, shell):
        assert warning.close_warning() is True
        assert warning.close_warning() is False
        assert shell.count("close_warning") == 1

    def test_warnings_counted_across_session(self, warning):
        warning.handle(event("RESOLVE_CHECKED", CLEAN))
        warning.handle(event("MONITOR_CHECKED", USB))

        assert warning.state.warnings_issued == 2
        assert warning.state.active_violation.kind == ViolationKind.PERIPHERAL_ATTACHED


class TestExpiry:
    def test_expiry_with_violation_terminates(self, warning, shell):
        shell.calls.clear()

        assert warning.handle(event("WARNING_EXPIRED", CAMERA_OFF)) == SessionPhase.TERMINATED
        assert shell.names() == ["close_warning", "exit_kiosk", "unlock_for_exit", "show_terminated"]
        assert warning.state.terminated

    def test_expiry_after_fix_resumes(self, warning, shell):
        assert warning.handle(event("WARNING_EXPIRED", CLEAN)) == SessionPhase.ACTIVE
        assert not warning.state.terminated
        assert shell.count("show_terminated") == 0

    def test_expiry_without_verdict_terminates(self, warning):
        assert warning.handle(event("WARNING_EXPIRED")) == SessionPhase.TERMINATED

    def test_expiry_outside_warning_rejected(self, active):
        with pytest.raises(StateViolation):
            active.handle(event("WARNING_EXPIRED", CAMERA_OFF))

        assert active.phase == SessionPhase.ACTIVE

    def test_expiry_of_earlier_warning_rejected(self, warning, shell):
        warning.handle(event("RESOLVE_CHECKED", CLEAN))
        warning.handle(event("MONITOR_CHECKED", USB))
        assert warning.state.warnings_issued == 2

        with pytest.raises(StateViolation):
            warning.handle(SessionEvent(SessionEventType.WARNING_EXPIRED, USB, warning_id=1))

        assert warning.phase == SessionPhase.WARNING
        assert shell.count("show_terminated") == 0

    def test_expiry_of_current_warning_terminates(self, warning):
        expired = SessionEvent(SessionEventType.WARNING_EXPIRED, CAMERA_OFF, warning_id=1)

        assert warning.handle(expired) == SessionPhase.TERMINATED


class TestTerminated:
    """TERMINATED is final"""

    @pytest.fixture
    def terminated(self, warning, shell):
        warning.handle(event("WARNING_EXPIRED", CAMERA_OFF))
        shell.calls.clear()
        return warning

    @pytest.mark.parametrize("kind", ["START_REQUESTED", "WARNING_EXPIRED", "END_REQUESTED"])
    def test_events_rejected(self, terminated, kind):
        with pytest.raises(StateViolation):
            terminated.handle(event(kind, CLEAN))

        assert terminated.phase == SessionPhase.TERMINATED

    def test_check_results_ignored(self, terminated, shell):
        terminated.handle(event("MONITOR_CHECKED", USB))
        terminated.handle(event("RESOLVE_CHECKED", CLEAN))

        assert terminated.phase == SessionPhase.TERMINATED
        assert shell.calls == []

    def test_no_new_warning(self, terminated, shell):
        assert terminated.open_warning(USB) is False
        assert shell.calls == []

    def test_quit_allowed(self, terminated, shell):
        assert terminated.handle(event("QUIT_REQUESTED")) == SessionPhase.TERMINATED
        assert shell.names() == ["quit"]


class TestEndAndQuit:
    def test_end_from_active(self, active, shell):
        shell.calls.clear()

        assert active.handle(event("END_REQUESTED")) == SessionPhase.ENDED
        assert shell.names() == ["exit_kiosk", "unlock_for_exit", "quit"]

    def test_end_from_warning_closes_prompt(self, warning, shell):
        shell.calls.clear()

        warning.handle(event("END_REQUESTED"))

        assert shell.names() == ["close_warning", "exit_kiosk", "unlock_for_exit", "quit"]
        assert not warning.state.showing_warning

    def test_end_before_start_rejected(self, machine):
        with pytest.raises(StateViolation):
            machine.handle(event("END_REQUESTED"))

    def test_quit_from_idle(self, machine, shell):
        assert machine.handle(event("QUIT_REQUESTED")) == SessionPhase.IDLE
        assert shell.names() == ["quit"]

    @pytest.mark.parametrize("fixture", ["active", "warning"])
    def test_quit_during_session_rejected(self, request, fixture, shell):
        machine = request.getfixturevalue(fixture)
        shell.calls.clear()

        with pytest.raises(StateViolation):
            machine.handle(event("QUIT_REQUESTED"))

        assert shell.calls == []

    def test_state_is_a_copy(self, active):
        state = active.state
        state.phase = SessionPhase.TERMINATED

        assert active.phase == SessionPhase.ACTIVE
