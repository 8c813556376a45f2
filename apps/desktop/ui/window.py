"""
Main proctoring window.

Three pages in a stack: pre-flight start screen, in-session screen and the
terminated screen. The window never decides anything about the session; it
forwards button presses to the integrity monitor and applies the commands
the monitor sends back through QtPresentationShell.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QTimer, Qt, Signal
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from packages.shared.config import AppConfig
from packages.shared.store import ConfigStore
from packages.core.monitor.session_monitor import IntegritySessionMonitor
from packages.core.monitor.types import (
    EnvironmentSnapshot,
    Evaluation,
    SessionPhase,
    SessionState,
)

from .components import Card, CheckRow, DangerButton, PrimaryButton, SecondaryButton, StatusPill
from .shell import QtPresentationShell, ScreenCounter
from .theme import Theme
from .warning_dialog import WarningDialog

log = logging.getLogger(__name__)

PREFLIGHT_INTERVAL_MS = 3000


class MainWindow(QMainWindow):
    """Proctoring window driven by IntegritySessionMonitor."""

    # (snapshot, evaluation) from the monitor thread
    preflightFinished = Signal(object, object)
    monitorError = Signal(str)

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("ProctorLock")
        self.resize(1100, 800)
        self.setMinimumSize(800, 600)

        self.theme = Theme()

        self.store = ConfigStore()
        self.cfg: AppConfig = self.store.load()

        self._locked = False
        self._warning: Optional[WarningDialog] = None
        self._preflight_pending = False

        self.shell = QtPresentationShell(self)
        self.screens = ScreenCounter(QGuiApplication.instance())
        self.monitor = IntegritySessionMonitor(
            config=self.cfg.to_monitor_config(),
            shell=self.shell,
            display_counter=self.screens.count,
        )
        self.monitor.on_error(self.monitorError.emit)
        self.monitorError.connect(self._on_monitor_error)
        self._connect_shell()

        self._build_ui()
        self.setStyleSheet(self.theme.get_stylesheet())

        self.preflightFinished.connect(self._on_preflight_finished)
        self.monitor.start()

        self._preflight_timer = QTimer(self)
        self._preflight_timer.timeout.connect(self._run_preflight)
        self._preflight_timer.start(PREFLIGHT_INTERVAL_MS)
        QTimer.singleShot(0, self._run_preflight)

        self._status_timer = QTimer(self)
        self._status_timer.timeout.connect(self._refresh_status)
        self._status_timer.start(800)

    def _connect_shell(self) -> None:
        self.shell.lockWindowRequested.connect(self._lock_window)
        self.shell.enterKioskRequested.connect(self._enter_kiosk)
        self.shell.exitKioskRequested.connect(self._exit_kiosk)
        self.shell.showWarningRequested.connect(self._show_warning)
        self.shell.closeWarningRequested.connect(self._close_warning)
        self.shell.showTerminatedRequested.connect(self._show_terminated)
        self.shell.unlockForExitRequested.connect(self._unlock_for_exit)
        self.shell.quitRequested.connect(self._quit)

    # UI construction

    def _build_ui(self) -> None:
        self.stack = QStackedWidget()
        self.setCentralWidget(self.stack)

        self.start_page = self._build_start_page()
        self.session_page = self._build_session_page()
        self.terminated_page = self._build_terminated_page()

        self.stack.addWidget(self.start_page)
        self.stack.addWidget(self.session_page)
        self.stack.addWidget(self.terminated_page)

    def _page(self, title: str, subtitle: str) -> tuple[QWidget, QVBoxLayout]:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(48, 48, 48, 48)
        layout.setSpacing(20)

        title_label = QLabel(title)
        title_label.setObjectName("TitleLabel")
        layout.addWidget(title_label)

        subtitle_label = QLabel(subtitle)
        subtitle_label.setObjectName("SubtitleLabel")
        subtitle_label.setWordWrap(True)
        layout.addWidget(subtitle_label)
        return page, layout

    def _build_start_page(self) -> QWidget:
        page, layout = self._page(
            "ProctorLock",
            "Your session starts once every requirement below is met. "
            "It will be monitored until you end it.",
        )

        card = Card()
        section = QLabel("Requirements")
        section.setObjectName("SectionLabel")
        card.layout.addWidget(section)

        self.row_display = CheckRow("Only one display connected")
        self.row_zoom = CheckRow("Zoom running")
        self.row_camera = CheckRow("Camera on in Zoom")
        self.row_bluetooth = CheckRow("Bluetooth turned off")
        self.row_usb = CheckRow("No USB devices connected")
        for row in (self.row_display, self.row_zoom, self.row_camera, self.row_bluetooth, self.row_usb):
            card.layout.addWidget(row)
        layout.addWidget(card)

        layout.addStretch()

        buttons = QHBoxLayout()
        buttons.setSpacing(12)
        self.btn_quit = SecondaryButton("Quit")
        self.btn_quit.clicked.connect(lambda: self.monitor.request_quit())
        buttons.addWidget(self.btn_quit)
        buttons.addStretch()

        self.btn_recheck = SecondaryButton("Check Again")
        self.btn_recheck.clicked.connect(lambda: self._run_preflight())
        buttons.addWidget(self.btn_recheck)

        self.btn_start = PrimaryButton("Start Session")
        self.btn_start.setEnabled(False)
        self.btn_start.clicked.connect(lambda: self._start_session())
        buttons.addWidget(self.btn_start)
        layout.addLayout(buttons)
        return page

    def _build_session_page(self) -> QWidget:
        page, layout = self._page(
            "Session in progress",
            "Keep Zoom running with your camera on. Do not connect displays, "
            "Bluetooth or USB devices until you end the session.",
        )

        status_row = QHBoxLayout()
        status_row.setSpacing(12)
        self.status_pill = StatusPill("ACTIVE", active=True)
        status_row.addWidget(self.status_pill)
        self.warnings_label = QLabel("")
        self.warnings_label.setObjectName("HintLabel")
        status_row.addWidget(self.warnings_label)
        status_row.addStretch()
        layout.addLayout(status_row)

        layout.addStretch()

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.btn_end = SecondaryButton("End Session")
        self.btn_end.clicked.connect(lambda: self.monitor.request_end())
        buttons.addWidget(self.btn_end)
        layout.addLayout(buttons)
        return page

    def _build_terminated_page(self) -> QWidget:
        page, layout = self._page(
            "Session terminated",
            "A fair play requirement was not restored before the warning timer ran out. "
            "This session cannot be resumed.",
        )
        layout.addStretch()

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.btn_terminated_quit = DangerButton("Quit")
        self.btn_terminated_quit.clicked.connect(lambda: self.monitor.request_quit())
        buttons.addWidget(self.btn_terminated_quit)
        layout.addLayout(buttons)
        return page

    # Pre-flight

    def _run_preflight(self) -> None:
        if self._preflight_pending or self.monitor.get_state().started:
            return
        self._preflight_pending = True
        self.monitor.request_preflight(lambda snap, ev: self.preflightFinished.emit(snap, ev))

    def _on_preflight_finished(
        self,
        snapshot: Optional[EnvironmentSnapshot],
        evaluation: Optional[Evaluation],
    ) -> None:
        self._preflight_pending = False
        if snapshot is None or evaluation is None:
            for row in (self.row_display, self.row_zoom, self.row_camera, self.row_bluetooth, self.row_usb):
                row.set_pending()
            self.btn_start.setEnabled(False)
            return

        displays = snapshot.display.display_count
        self.row_display.set_result(displays == 1, f"{displays} display(s)")
        self.row_zoom.set_result(snapshot.conference.running)
        self.row_camera.set_result(snapshot.conference.camera_active)
        self.row_bluetooth.set_result(not snapshot.radio.enabled, "On" if snapshot.radio.enabled else "Off")
        usb = snapshot.peripheral.count
        self.row_usb.set_result(usb == 0, f"{usb} device(s)" if usb else "None")

        state = self.monitor.get_state()
        self.btn_start.setEnabled(evaluation.clean and not state.started)

    def _start_session(self) -> None:
        self.btn_start.setEnabled(False)
        self._preflight_timer.stop()
        self.monitor.request_start()

    # Shell commands (GUI thread)

    def _lock_window(self) -> None:
        log.info("Locking window")
        self._locked = True
        self.setWindowFlag(Qt.WindowStaysOnTopHint, True)
        self.setWindowFlag(Qt.WindowCloseButtonHint, False)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, False)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, False)
        self.stack.setCurrentWidget(self.session_page)
        self.show()

    def _enter_kiosk(self) -> None:
        self.showFullScreen()
        self.raise_()
        self.activateWindow()

    def _exit_kiosk(self) -> None:
        self.showNormal()

    def _show_warning(self, message: str) -> None:
        if self._warning is not None:
            return
        self._warning = WarningDialog(message, self.cfg.warning_grace_seconds, self)
        self._warning.setStyleSheet(self.theme.get_stylesheet())
        self._warning.expired.connect(lambda: self.monitor.warning_timer_expired())
        self._warning.show()
        self._warning.raise_()

    def _close_warning(self) -> None:
        if self._warning is None:
            return
        self._warning.dismiss()
        self._warning.deleteLater()
        self._warning = None

    def _show_terminated(self) -> None:
        self.stack.setCurrentWidget(self.terminated_page)

    def _unlock_for_exit(self) -> None:
        self._locked = False
        self.setWindowFlag(Qt.WindowCloseButtonHint, True)
        self.show()

    def _quit(self) -> None:
        self._locked = False
        self.close()
        QApplication.quit()

    # Status

    def _refresh_status(self) -> None:
        state: SessionState = self.monitor.get_state()
        if state.phase == SessionPhase.WARNING:
            name, text = "StatusPillWarning", "WARNING"
        elif state.phase == SessionPhase.ACTIVE:
            name, text = "StatusPillActive", "ACTIVE"
        elif state.phase == SessionPhase.TERMINATED:
            name, text = "StatusPillStopped", "TERMINATED"
        else:
            name, text = "StatusPill", state.phase.value
        if self.status_pill.objectName() != name:
            self.status_pill.setObjectName(name)
            self.status_pill.style().unpolish(self.status_pill)
            self.status_pill.style().polish(self.status_pill)
        self.status_pill.setText(text)

        if state.warnings_issued:
            self.warnings_label.setText(f"Warnings this session: {state.warnings_issued}")

    def _on_monitor_error(self, msg: str) -> None:
        log.error("Monitor error: %s", msg)
        self.warnings_label.setText(f"Monitor error: {msg}")

    def closeEvent(self, event) -> None:
        if self._locked:
            event.ignore()
            return
        self._status_timer.stop()
        self._preflight_timer.stop()
        self.monitor.stop()
        event.accept()
