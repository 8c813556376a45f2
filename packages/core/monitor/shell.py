from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)


class PresentationShell(Protocol):
    """Commands the integrity monitor issues to whatever owns the window."""

    def lock_window(self) -> None:
        ...

    def enter_kiosk(self) -> None:
        ...

    def exit_kiosk(self) -> None:
        ...

    def show_warning(self, message: str) -> None:
        ...

    def close_warning(self) -> None:
        ...

    def show_terminated(self) -> None:
        ...

    def unlock_for_exit(self) -> None:
        ...

    def quit(self) -> None:
        ...


class LoggingShell:
    """Headless shell: every command is only logged."""

    def lock_window(self) -> None:
        log.info("lock_window")

    def enter_kiosk(self) -> None:
        log.info("enter_kiosk")

    def exit_kiosk(self) -> None:
        log.info("exit_kiosk")

    def show_warning(self, message: str) -> None:
        log.warning("show_warning: %s", message)

    def close_warning(self) -> None:
        log.info("close_warning")

    def show_terminated(self) -> None:
        log.warning("show_terminated")

    def unlock_for_exit(self) -> None:
        log.info("unlock_for_exit")

    def quit(self) -> None:
        log.info("quit")
