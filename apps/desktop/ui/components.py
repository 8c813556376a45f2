"""
Reusable UI components for the proctoring window.
"""

from __future__ import annotations

from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget


class Card(QFrame):
    """Card container with rounded corners and subtle styling."""

    def __init__(self, parent=None, object_name: str = "Card"):
        super().__init__(parent)
        self.setObjectName(object_name)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(16, 16, 16, 16)
        self.layout.setSpacing(12)


class PrimaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("PrimaryButton")


class SecondaryButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("SecondaryButton")


class DangerButton(QPushButton):
    def __init__(self, text: str = "", parent=None):
        super().__init__(text, parent)
        self.setObjectName("DangerButton")


class StatusPill(QLabel):
    """Status indicator pill (e.g., "ACTIVE", "WARNING")."""

    def __init__(self, text: str = "", active: bool = False, parent=None):
        super().__init__(text, parent)
        self.setObjectName("StatusPillActive" if active else "StatusPill")


class CheckRow(QWidget):
    """One pre-flight requirement: label on the left, pass/fail on the right."""

    def __init__(self, text: str, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 4, 0, 4)
        layout.setSpacing(12)

        self.label = QLabel(text)
        self.label.setObjectName("BodyLabel")
        layout.addWidget(self.label, 1)

        self.status = QLabel("Checking…")
        self.status.setObjectName("CheckPending")
        layout.addWidget(self.status)

    def set_result(self, ok: bool, detail: str = "") -> None:
        self.status.setText(("✓ " if ok else "✗ ") + (detail or ("OK" if ok else "Not met")))
        self.status.setObjectName("CheckPass" if ok else "CheckFail")
        # Object name changes only apply after a style refresh
        self.status.style().unpolish(self.status)
        self.status.style().polish(self.status)

    def set_pending(self) -> None:
        self.status.setText("Checking…")
        self.status.setObjectName("CheckPending")
        self.status.style().unpolish(self.status)
        self.status.style().polish(self.status)
