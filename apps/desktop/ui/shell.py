"""
Qt side of the presentation shell.

The integrity monitor calls these commands from its own thread. Each one
only emits a signal; Qt queues the signal onto the GUI thread where
MainWindow applies it.
"""

from __future__ import annotations

import logging
from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QGuiApplication, QScreen

log = logging.getLogger(__name__)


class QtPresentationShell(QObject):
    lockWindowRequested = Signal()
    enterKioskRequested = Signal()
    exitKioskRequested = Signal()
    showWarningRequested = Signal(str)
    closeWarningRequested = Signal()
    showTerminatedRequested = Signal()
    unlockForExitRequested = Signal()
    quitRequested = Signal()

    def lock_window(self) -> None:
        self.lockWindowRequested.emit()

    def enter_kiosk(self) -> None:
        self.enterKioskRequested.emit()

    def exit_kiosk(self) -> None:
        self.exitKioskRequested.emit()

    def show_warning(self, message: str) -> None:
        self.showWarningRequested.emit(message)

    def close_warning(self) -> None:
        self.closeWarningRequested.emit()

    def show_terminated(self) -> None:
        self.showTerminatedRequested.emit()

    def unlock_for_exit(self) -> None:
        self.unlockForExitRequested.emit()

    def quit(self) -> None:
        self.quitRequested.emit()


class ScreenCounter(QObject):
    """
    Display count for the display probe. Qt's screen list may only be read
    on the GUI thread, so the count is cached here and refreshed on
    screenAdded/screenRemoved; the probe thread just reads the int.
    """

    def __init__(self, app: QGuiApplication) -> None:
        super().__init__(app)
        self._count = len(app.screens())
        app.screenAdded.connect(self._on_screen_added)
        app.screenRemoved.connect(self._on_screen_removed)

    def count(self) -> int:
        return self._count

    def _on_screen_added(self, screen: QScreen) -> None:
        self._count = len(QGuiApplication.screens())
        log.info("Display attached: %s (%d total)", screen.name(), self._count)

    def _on_screen_removed(self, screen: QScreen) -> None:
        # The removed screen can still be listed while this signal is delivered
        self._count = len([s for s in QGuiApplication.screens() if s is not screen])
        log.info("Display detached: %s (%d total)", screen.name(), self._count)
