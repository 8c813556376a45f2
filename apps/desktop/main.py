import logging
import signal
import sys
from PySide6.QtWidgets import QApplication

from packages.shared.paths import ensure_app_dirs
from packages.core.logging_ import setup_logging
from .ui.window import MainWindow

log = logging.getLogger(__name__)


def main() -> None:
    ensure_app_dirs()
    setup_logging(logging.DEBUG if "--verbose" in sys.argv else logging.INFO)

    app = QApplication(sys.argv)
    app.setApplicationName("ProctorLock")
    app.setQuitOnLastWindowClosed(True)
    win = MainWindow()
    log.info(
        "Config %s: monitor every %dms, resolve every %dms, %ds to fix a violation",
        win.store.path(),
        win.cfg.monitor_interval_ms,
        win.cfg.resolve_interval_ms,
        win.cfg.warning_grace_seconds,
    )
    win.show()

    # closeEvent refuses while a session holds the window, so Ctrl+C cannot end one
    def signal_handler(sig, frame):
        log.info("Interrupt received, closing window")
        win.close()

    if hasattr(signal, 'SIGINT'):
        signal.signal(signal.SIGINT, signal_handler)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
