"""
Background integrity monitor for GUI hosts.

The desktop shell owns the main thread, so the scheduler's asyncio loop
runs on a daemon thread. Every public method here is safe to call from the
GUI thread; requests are marshalled onto the loop with call_soon_threadsafe.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Optional

from .inspector import EnvironmentInspector
from .scheduler import MonitoringScheduler
from .shell import PresentationShell
from .state_machine import SessionStateMachine
from .types import EnvironmentSnapshot, Evaluation, IntegrityMonitorConfig, SessionState

log = logging.getLogger(__name__)

PreflightCallback = Callable[[Optional[EnvironmentSnapshot], Optional[Evaluation]], None]


class IntegritySessionMonitor:
    """
    Owns the state machine and scheduler for one proctored session.
    """

    def __init__(
        self,
        config: dict,
        shell: PresentationShell,
        display_counter: Optional[Callable[[], int]] = None,
        inspector: Optional[EnvironmentInspector] = None,
    ) -> None:
        self._cfg = IntegrityMonitorConfig.from_dict(config)
        self._inspector = inspector or EnvironmentInspector.from_config(self._cfg, display_counter)
        self._machine = SessionStateMachine(shell)
        self._lock = threading.Lock()

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._scheduler: Optional[MonitoringScheduler] = None
        self._stop_evt: Optional[asyncio.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

        self._error_cb: Optional[Callable[[str], None]] = None

    def on_error(self, cb: Callable[[str], None]) -> None:
        self._error_cb = cb

    def get_state(self) -> SessionState:
        return self._machine.state

    @property
    def config(self) -> IntegrityMonitorConfig:
        return self._cfg

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._ready.clear()
            self._thread = threading.Thread(target=self._run, name="IntegritySessionMonitor", daemon=True)
            self._thread.start()

        if not self._ready.wait(timeout=5.0):
            self._emit_error("Monitor loop did not start")

    def stop(self) -> None:
        with self._lock:
            loop, stop_evt, thread = self._loop, self._stop_evt, self._thread
        if loop is not None and stop_evt is not None and not loop.is_closed():
            try:
                loop.call_soon_threadsafe(stop_evt.set)
            except RuntimeError:
                pass  # loop already shut down
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=5.0)

    # Shell events

    def request_start(self) -> None:
        self._post(lambda s: s.request_start())

    def warning_timer_expired(self) -> None:
        self._post(lambda s: s.warning_timer_expired())

    def request_end(self) -> None:
        self._post(lambda s: s.request_end())

    def request_quit(self) -> None:
        self._post(lambda s: s.request_quit())

    def request_preflight(self, cb: PreflightCallback) -> None:
        """
        Run one inspection outside the session state machine. `cb` is called
        on the monitor thread with (snapshot, evaluation), or (None, None)
        if the inspection failed.
        """
        with self._lock:
            loop, scheduler = self._loop, self._scheduler
        if loop is None or scheduler is None:
            log.warning("Preflight requested before the monitor started")
            cb(None, None)
            return

        async def run() -> None:
            try:
                evaluation = await scheduler.inspect_once()
            except Exception as e:
                log.exception("Preflight inspection failed")
                self._emit_error(str(e))
                cb(None, None)
                return
            cb(scheduler.last_snapshot, evaluation)

        asyncio.run_coroutine_threadsafe(run(), loop)

    # Internals

    def _post(self, fn: Callable[[MonitoringScheduler], None]) -> None:
        with self._lock:
            loop, scheduler = self._loop, self._scheduler
        if loop is None or scheduler is None:
            log.warning("Monitor not running, dropping request")
            return
        loop.call_soon_threadsafe(fn, scheduler)

    def _emit_error(self, msg: str) -> None:
        if self._error_cb:
            self._error_cb(msg)

    def _run(self) -> None:
        try:
            asyncio.run(self._main())
        except Exception as e:
            log.exception("Monitor loop crashed")
            self._emit_error(str(e))
        finally:
            with self._lock:
                self._loop = None
                self._scheduler = None
                self._stop_evt = None

    async def _main(self) -> None:
        scheduler = MonitoringScheduler(
            self._machine,
            self._inspector,
            monitor_interval=self._cfg.monitor_interval_ms / 1000.0,
            resolve_interval=self._cfg.resolve_interval_ms / 1000.0,
        )
        scheduler.start()
        stop_evt = asyncio.Event()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._scheduler = scheduler
            self._stop_evt = stop_evt
        self._ready.set()
        log.info("Integrity monitor ready")

        try:
            await stop_evt.wait()
        finally:
            await scheduler.shutdown()
