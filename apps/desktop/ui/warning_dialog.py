from __future__ import annotations

from PySide6.QtCore import QTimer, Qt, Signal
from PySide6.QtWidgets import QDialog, QLabel, QVBoxLayout

from .components import Card


class WarningDialog(QDialog):
    """
    Frameless always-on-top prompt shown while a violation is pending.
    Counts down `grace_seconds` and emits `expired` once when it reaches zero.
    """

    expired = Signal()

    def __init__(self, message: str, grace_seconds: int, parent=None):
        super().__init__(parent)
        self.setWindowFlags(Qt.Dialog | Qt.FramelessWindowHint | Qt.WindowStaysOnTopHint)
        self.setModal(True)
        self.setFixedSize(600, 500)
        self._remaining = grace_seconds
        self._closing_allowed = False

        outer = QVBoxLayout(self)
        outer.setContentsMargins(24, 24, 24, 24)

        card = Card(self, object_name="WarningCard")
        layout = card.layout
        layout.setSpacing(16)

        title = QLabel("Fair play issue detected")
        title.setObjectName("WarningTitle")
        title.setAlignment(Qt.AlignCenter)
        layout.addWidget(title)

        self.message_label = QLabel(message)
        self.message_label.setObjectName("SectionLabel")
        self.message_label.setAlignment(Qt.AlignCenter)
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        hint = QLabel("Fix the issue before the timer runs out or your session will be terminated.")
        hint.setObjectName("HintLabel")
        hint.setAlignment(Qt.AlignCenter)
        hint.setWordWrap(True)
        layout.addWidget(hint)

        layout.addStretch()
        self.countdown_label = QLabel(str(self._remaining))
        self.countdown_label.setObjectName("CountdownLabel")
        self.countdown_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.countdown_label)
        layout.addStretch()

        outer.addWidget(card)

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_tick)
        self._timer.start(1000)

    def _on_tick(self) -> None:
        self._remaining -= 1
        self.countdown_label.setText(str(max(self._remaining, 0)))
        if self._remaining <= 0:
            self._timer.stop()
            self.expired.emit()

    def dismiss(self) -> None:
        self._timer.stop()
        self._closing_allowed = True
        self.close()

    def reject(self) -> None:
        # Escape must not dismiss the prompt
        if self._closing_allowed:
            super().reject()

    def closeEvent(self, event) -> None:
        if self._closing_allowed:
            event.accept()
        else:
            event.ignore()
