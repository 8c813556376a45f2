"""
Tests for the threaded integrity monitor used by the desktop window.
These run in real time with short intervals.
"""
import threading
import time

import pytest

from packages.core.monitor.session_monitor import IntegritySessionMonitor
from packages.core.monitor.types import SessionPhase

FAST = {"monitor_interval_ms": 50, "resolve_interval_ms": 50}


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


@pytest.fixture
def monitor(environment, shell):
    m = IntegritySessionMonitor(FAST, shell, inspector=environment.inspector())
    yield m
    m.stop()


class TestIntegritySessionMonitor:
    def test_config_from_dict(self, monitor):
        assert monitor.config.monitor_interval_ms == 50
        assert monitor.config.conference_process_name == "zoom.us"

    def test_requests_before_start_are_dropped(self, monitor, shell):
        monitor.request_start()

        assert monitor.get_state().phase == SessionPhase.IDLE
        assert shell.calls == []

    def test_start_session(self, monitor, shell):
        monitor.start()
        monitor.request_start()

        assert wait_for(lambda: monitor.get_state().phase == SessionPhase.ACTIVE)
        assert wait_for(lambda: shell.names()[:2] == ["lock_window", "enter_kiosk"])

    def test_violation_then_expiry_terminates(self, monitor, environment, shell):
        monitor.start()
        monitor.request_start()
        assert wait_for(lambda: monitor.get_state().phase == SessionPhase.ACTIVE)

        environment.usb_count = 1
        assert wait_for(lambda: monitor.get_state().phase == SessionPhase.WARNING)
        assert ("show_warning", "Disconnect all USB devices") in shell.calls

        monitor.warning_timer_expired()

        assert wait_for(lambda: monitor.get_state().terminated)
        assert wait_for(lambda: shell.count("show_terminated") == 1)

    def test_end_session(self, monitor, shell):
        monitor.start()
        monitor.request_start()
        assert wait_for(lambda: monitor.get_state().phase == SessionPhase.ACTIVE)

        monitor.request_end()

        assert wait_for(lambda: monitor.get_state().phase == SessionPhase.ENDED)
        assert wait_for(lambda: shell.count("quit") == 1)

    def test_preflight(self, monitor, environment):
        environment.display_count = 2
        monitor.start()
        done = threading.Event()
        results = []

        def on_result(snapshot, evaluation):
            results.append((snapshot, evaluation))
            done.set()

        monitor.request_preflight(on_result)

        assert done.wait(timeout=5.0)
        snapshot, evaluation = results[0]
        assert snapshot.display.display_count == 2
        assert evaluation.headline == "External display detected"
        assert monitor.get_state().phase == SessionPhase.IDLE

    def test_preflight_before_start(self, monitor):
        results = []

        monitor.request_preflight(lambda s, e: results.append((s, e)))

        assert results == [(None, None)]

    def test_stop_is_idempotent(self, monitor):
        monitor.start()
        monitor.stop()
        monitor.stop()

        monitor.request_start()
        assert monitor.get_state().phase == SessionPhase.IDLE
