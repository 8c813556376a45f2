"""
Stylesheet for the proctoring window.

The window runs full screen for the whole session, so there is a single
dark palette. Pass/fail/warning colors are shared by the pre-flight rows,
the status pill and the warning prompt so a state always reads the same.
"""

from __future__ import annotations

FONT_FAMILY = "-apple-system, BlinkMacSystemFont, Segoe UI, sans-serif"

SPACING = {"xs": "4px", "sm": "8px", "md": "12px", "xl": "24px"}

FONT_SIZES = {
    "hint": "13px",
    "body": "15px",
    "section": "17px",
    "warning": "22px",
    "title": "28px",
    "countdown": "56px",
}

PALETTE = {
    "background": "#000000",
    "surface": "#1C1C1E",
    "surface_raised": "#2C2C2E",
    "text": "#FFFFFF",
    "text_muted": "#98989D",
    "text_faint": "#636366",
    "border": "#38383A",
    "accent": "#007AFF",
    "accent_pressed": "#0062CC",
}

# Session/check state -> color
STATE_COLORS = {
    "pass": "#34C759",
    "warning": "#FF9500",
    "fail": "#FF3B30",
}


def _rgba(hex_color: str, alpha: float) -> str:
    hex_color = hex_color.lstrip("#")
    r, g, b = int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16)
    return f"rgba({r}, {g}, {b}, {alpha})"


class Theme:
    """Builds the QSS applied to MainWindow and the warning prompt."""

    def __init__(self, palette: dict | None = None):
        self.colors = dict(PALETTE, **(palette or {}))

    def get_stylesheet(self) -> str:
        return "\n".join([
            self._base(),
            self._labels(),
            self._buttons(),
            self._cards(),
            self._status_pills(),
        ])

    def _base(self) -> str:
        c = self.colors
        return f"""
        QMainWindow, QDialog {{
            background-color: {c["background"]};
            color: {c["text"]};
            font-family: {FONT_FAMILY};
        }}
        """

    def _labels(self) -> str:
        c = self.colors
        rules = [
            ("TitleLabel", FONT_SIZES["title"], "700", c["text"]),
            ("SubtitleLabel", FONT_SIZES["hint"], "400", c["text_muted"]),
            ("HintLabel", FONT_SIZES["hint"], "400", c["text_muted"]),
            ("SectionLabel", FONT_SIZES["section"], "600", c["text"]),
            ("BodyLabel", FONT_SIZES["body"], "400", c["text"]),
            ("CheckPass", FONT_SIZES["body"], "600", STATE_COLORS["pass"]),
            ("CheckFail", FONT_SIZES["body"], "600", STATE_COLORS["fail"]),
            ("CheckPending", FONT_SIZES["body"], "400", c["text_faint"]),
            ("WarningTitle", FONT_SIZES["warning"], "700", STATE_COLORS["fail"]),
            ("CountdownLabel", FONT_SIZES["countdown"], "700", c["text"]),
        ]
        return "\n".join(
            f"""
        QLabel#{name} {{
            font-size: {size};
            font-weight: {weight};
            color: {color};
        }}"""
            for name, size, weight, color in rules
        )

    def _buttons(self) -> str:
        c = self.colors
        shape = f"""
            border-radius: 20px;
            padding: {SPACING["sm"]} {SPACING["xl"]};
            font-size: {FONT_SIZES["body"]};
            min-height: 36px;"""
        return f"""
        QPushButton#PrimaryButton {{
            background-color: {c["accent"]};
            color: #FFFFFF;
            border: none;
            font-weight: 600;{shape}
        }}
        QPushButton#PrimaryButton:pressed {{
            background-color: {c["accent_pressed"]};
        }}
        QPushButton#PrimaryButton:disabled {{
            background-color: {c["border"]};
            color: {c["text_faint"]};
        }}
        QPushButton#SecondaryButton {{
            background-color: {c["surface_raised"]};
            color: {c["accent"]};
            border: 1px solid {c["border"]};
            font-weight: 500;{shape}
        }}
        QPushButton#DangerButton {{
            background-color: {STATE_COLORS["fail"]};
            color: #FFFFFF;
            border: none;
            font-weight: 600;{shape}
        }}
        """

    def _cards(self) -> str:
        c = self.colors
        return f"""
        QFrame#Card {{
            background-color: {c["surface"]};
            border-radius: 16px;
            border: 1px solid {c["border"]};
        }}
        QFrame#WarningCard {{
            background-color: {c["surface"]};
            border-radius: 16px;
            border: 2px solid {STATE_COLORS["fail"]};
        }}
        """

    def _status_pills(self) -> str:
        c = self.colors
        pills = {
            "StatusPill": (c["surface_raised"], c["text_muted"]),
            "StatusPillActive": (_rgba(STATE_COLORS["pass"], 0.15), STATE_COLORS["pass"]),
            "StatusPillWarning": (_rgba(STATE_COLORS["warning"], 0.15), STATE_COLORS["warning"]),
            "StatusPillStopped": (_rgba(STATE_COLORS["fail"], 0.15), STATE_COLORS["fail"]),
        }
        return "\n".join(
            f"""
        QLabel#{name} {{
            background-color: {bg};
            color: {fg};
            border-radius: 12px;
            padding: {SPACING["xs"]} {SPACING["md"]};
            font-size: {FONT_SIZES["hint"]};
            font-weight: 500;
        }}"""
            for name, (bg, fg) in pills.items()
        )
