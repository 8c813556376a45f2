"""
Shared fixtures: a shell that records commands, a scriptable environment
whose probes never touch the OS, and a manual clock for periodic tasks.
"""
import asyncio

import pytest

from packages.core.monitor.inspector import EnvironmentInspector
from packages.core.monitor.probe import EnvironmentProbe
from packages.core.monitor.types import (
    ConferenceResult,
    DisplayResult,
    EnvironmentSnapshot,
    PeripheralResult,
    RadioResult,
)


def make_snapshot(display_count=1, running=True, camera_active=True, radio_enabled=False, usb_count=0):
    return EnvironmentSnapshot(
        display=DisplayResult(display_count=display_count),
        conference=ConferenceResult(running=running, camera_active=camera_active and running),
        radio=RadioResult(enabled=radio_enabled),
        peripheral=PeripheralResult(count=usb_count),
    )


class RecordingShell:
    def __init__(self):
        self.calls = []

    def lock_window(self):
        self.calls.append(("lock_window",))

    def enter_kiosk(self):
        self.calls.append(("enter_kiosk",))

    def exit_kiosk(self):
        self.calls.append(("exit_kiosk",))

    def show_warning(self, message):
        self.calls.append(("show_warning", message))

    def close_warning(self):
        self.calls.append(("close_warning",))

    def show_terminated(self):
        self.calls.append(("show_terminated",))

    def unlock_for_exit(self):
        self.calls.append(("unlock_for_exit",))

    def quit(self):
        self.calls.append(("quit",))

    def names(self):
        return [c[0] for c in self.calls]

    def count(self, name):
        return self.names().count(name)


class FakeProbe(EnvironmentProbe):
    def __init__(self, env, kind):
        self.env = env
        self.kind = kind

    async def check(self):
        if self.kind == "display":
            self.env.inspections += 1
        if self.env.gate is not None:
            await self.env.gate.wait()
        return getattr(self.env.snapshot(), self.kind)


class FakeEnvironment:
    """Mutable host state; tests flip fields between ticks."""

    def __init__(self):
        self.display_count = 1
        self.running = True
        self.camera_active = True
        self.radio_enabled = False
        self.usb_count = 0
        self.gate = None  # asyncio.Event that holds every probe until set
        self.inspections = 0

    def snapshot(self):
        return make_snapshot(
            display_count=self.display_count,
            running=self.running,
            camera_active=self.camera_active,
            radio_enabled=self.radio_enabled,
            usb_count=self.usb_count,
        )

    def inspector(self):
        return EnvironmentInspector(
            display=FakeProbe(self, "display"),
            conference=FakeProbe(self, "conference"),
            radio=FakeProbe(self, "radio"),
            peripheral=FakeProbe(self, "peripheral"),
        )


class ManualClock:
    """Drop-in for asyncio.sleep that only wakes sleepers on advance()."""

    def __init__(self):
        self.now = 0.0
        self._sleepers = []

    async def sleep(self, seconds):
        fut = asyncio.get_running_loop().create_future()
        entry = (self.now + seconds, fut)
        self._sleepers.append(entry)
        try:
            await fut
        finally:
            if entry in self._sleepers:
                self._sleepers.remove(entry)

    async def settle(self):
        for _ in range(50):
            await asyncio.sleep(0)

    async def advance(self, seconds):
        target = self.now + seconds
        await self.settle()
        while True:
            due = [e for e in self._sleepers if e[0] <= target + 1e-9 and not e[1].done()]
            if not due:
                break
            entry = min(due, key=lambda e: e[0])
            self._sleepers.remove(entry)
            self.now = entry[0]
            entry[1].set_result(None)
            await self.settle()
        self.now = target


@pytest.fixture
def shell():
    return RecordingShell()


@pytest.fixture
def environment():
    return FakeEnvironment()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def snapshot():
    return make_snapshot
