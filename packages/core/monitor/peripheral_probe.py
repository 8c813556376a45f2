"""
External USB peripheral probe.

`system_profiler SPUSBDataType` prints a tree where each device name sits
at exactly four spaces of indentation and its attributes sit deeper:

    USB 3.0 Bus:

      Host Controller Driver: AppleUSBXHCIPPT

    SanDisk USB Drive:

      Product ID: 0x5581

Only device-name lines at the four-space level start a new entry. Entries
whose name matches the internal-device denylist are not counted.
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from packages.shared.config import DEFAULT_INTERNAL_DEVICE_PATTERNS

from .commands import run_command
from .errors import ProbeUnavailable
from .probe import EnvironmentProbe
from .types import PeripheralResult

log = logging.getLogger(__name__)

_ENTRY_LINE = re.compile(r"^    [A-Za-z]")
_ATTRIBUTE_LINE = re.compile(r"^      ")


def device_entries(profile_output: str) -> List[str]:
    """Lower-cased names of every top-level device entry, in output order."""
    entries: List[str] = []
    for line in profile_output.splitlines():
        if _ENTRY_LINE.match(line) and not _ATTRIBUTE_LINE.match(line):
            entries.append(line.strip().lower())
    return entries


def is_internal(name: str, patterns: Sequence[str]) -> bool:
    return any(p in name for p in patterns)


def external_devices(
    profile_output: str,
    patterns: Sequence[str] = DEFAULT_INTERNAL_DEVICE_PATTERNS,
) -> List[str]:
    if not profile_output or not profile_output.strip() or "No USB" in profile_output:
        return []
    return [name for name in device_entries(profile_output) if not is_internal(name, patterns)]


def count_external_devices(
    profile_output: str,
    patterns: Sequence[str] = DEFAULT_INTERNAL_DEVICE_PATTERNS,
) -> int:
    return len(external_devices(profile_output, patterns))


class UsbPeripheralProbe(EnvironmentProbe[PeripheralResult]):
    kind = "peripheral"

    def __init__(
        self,
        internal_patterns: Sequence[str] = DEFAULT_INTERNAL_DEVICE_PATTERNS,
        timeout: float = 10.0,
    ) -> None:
        self._patterns = tuple(p.lower() for p in internal_patterns)
        self._timeout = timeout

    async def check(self) -> PeripheralResult:
        try:
            output = await run_command(["system_profiler", "SPUSBDataType"], timeout=self._timeout)
        except ProbeUnavailable as e:
            log.debug(f"USB inventory unavailable, assuming none attached: {e}")
            return PeripheralResult(count=0, evidence="unavailable")

        external = external_devices(output, self._patterns)
        return PeripheralResult(count=len(external), evidence=", ".join(external) or None)
