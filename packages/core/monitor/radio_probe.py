from __future__ import annotations

import logging
import re
from typing import Optional

from .commands import run_command
from .errors import ProbeUnavailable
from .probe import EnvironmentProbe
from .types import RadioResult

log = logging.getLogger(__name__)

# Older macOS prints "Bluetooth Power: On", newer prints "State: On" under the controller
_POWER_LINE = re.compile(r"(State|Bluetooth Power):", re.IGNORECASE)


def bluetooth_power_line(profile_output: str) -> Optional[str]:
    for line in profile_output.splitlines():
        if _POWER_LINE.search(line):
            return line.strip()
    return None


def line_reports_on(line: Optional[str]) -> bool:
    return line is not None and ": on" in line.lower()


class BluetoothProbe(EnvironmentProbe[RadioResult]):
    """
    Bluetooth state via system_profiler.

    Fails open: if the state cannot be read, Bluetooth is reported as
    disabled. This is the opposite of the camera probe's policy.
    """

    kind = "radio"

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def check(self) -> RadioResult:
        try:
            output = await run_command(["system_profiler", "SPBluetoothDataType"], timeout=self._timeout)
        except ProbeUnavailable as e:
            log.debug(f"Bluetooth state unavailable, assuming off: {e}")
            return RadioResult(enabled=False, evidence="unavailable")

        line = bluetooth_power_line(output)
        return RadioResult(enabled=line_reports_on(line), evidence=line)
