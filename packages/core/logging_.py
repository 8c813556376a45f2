from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from packages.shared.paths import ensure_app_dirs, log_path, session_log_path

SESSION_LOGGER = "packages.core.monitor.state_machine"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Console + rotating app.log on the root logger, plus a separate
    session.log that records only what the state machine reports.
    Calling it again is a no-op.
    """
    ensure_app_dirs()
    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        return

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    fh = RotatingFileHandler(str(log_path()), maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    sh = RotatingFileHandler(str(session_log_path()), maxBytes=500_000, backupCount=5, encoding="utf-8")
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    session_logger = logging.getLogger(SESSION_LOGGER)
    session_logger.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.INFO)
    session_logger.addHandler(sh)
