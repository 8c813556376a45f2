"""
Turns an EnvironmentSnapshot into the ordered list of policy violations.

The rule order below is also the headline priority: the first violation
is what the warning prompt shows.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

from .types import EnvironmentSnapshot, Evaluation, Violation, ViolationKind

Rule = Tuple[ViolationKind, Callable[[EnvironmentSnapshot], bool], str]

RULES: List[Rule] = [
    (
        ViolationKind.MULTI_DISPLAY,
        lambda s: s.display.display_count > 1,
        "External display detected",
    ),
    (
        ViolationKind.CONFERENCE_APP_NOT_RUNNING,
        lambda s: not s.conference.running,
        "Zoom is not running",
    ),
    (
        ViolationKind.CAMERA_INACTIVE,
        lambda s: s.conference.running and not s.conference.camera_active,
        "Camera has been turned off",
    ),
    (
        ViolationKind.RADIO_ENABLED,
        lambda s: s.radio.enabled,
        "Bluetooth must be disabled",
    ),
    (
        ViolationKind.PERIPHERAL_ATTACHED,
        lambda s: s.peripheral.count > 0,
        "Disconnect all USB devices",
    ),
]


def evaluate(snapshot: EnvironmentSnapshot) -> Evaluation:
    return Evaluation(
        violations=tuple(
            Violation(kind=kind, message=message)
            for kind, applies, message in RULES
            if applies(snapshot)
        )
    )
