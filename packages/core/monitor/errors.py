from __future__ import annotations


class ProbeUnavailable(Exception):
    """An OS query could not be run or returned nothing usable."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason


class StateViolation(Exception):
    """An event arrived while the session was in a phase that cannot accept it."""

    def __init__(self, event: str, phase: str) -> None:
        super().__init__(f"{event} is not valid in phase {phase}")
        self.event = event
        self.phase = phase
