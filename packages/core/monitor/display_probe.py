from __future__ import annotations

import logging
from typing import Callable, Optional

from .commands import run_command
from .errors import ProbeUnavailable
from .probe import EnvironmentProbe
from .types import DisplayResult

log = logging.getLogger(__name__)


def count_resolution_lines(profile_output: str) -> int:
    return sum(1 for line in profile_output.splitlines() if "Resolution:" in line)


class DisplayProbe(EnvironmentProbe[DisplayResult]):
    """
    Number of attached displays.

    With a `counter` (the desktop shell passes one backed by Qt's screen
    list) that is used directly; otherwise `system_profiler
    SPDisplaysDataType` is parsed. Unknown counts report a single display.
    """

    kind = "display"

    def __init__(self, counter: Optional[Callable[[], int]] = None, timeout: float = 10.0) -> None:
        self._counter = counter
        self._timeout = timeout

    async def check(self) -> DisplayResult:
        if self._counter is not None:
            try:
                count = int(self._counter())
            except Exception as e:
                log.debug(f"Display counter failed: {e}")
                return DisplayResult(display_count=1, evidence="unavailable")
            return DisplayResult(display_count=max(1, count), evidence=f"{count} screen(s)")

        try:
            output = await run_command(["system_profiler", "SPDisplaysDataType"], timeout=self._timeout)
        except ProbeUnavailable as e:
            log.debug(f"Display enumeration unavailable: {e}")
            return DisplayResult(display_count=1, evidence="unavailable")

        count = count_resolution_lines(output)
        return DisplayResult(display_count=max(1, count), evidence=f"{count} resolution line(s)")
