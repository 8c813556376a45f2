"""
Video-conferencing probe (Zoom on macOS).

Answers three questions in order:
  1. Is the conferencing process running? If not, stop here.
  2. Is a camera actively streaming, according to the IORegistry dump?
  3. Is the app screen sharing (helper process, or WindowServer handles)?

Camera detection fails closed: a failed or inconclusive `ioreg` lookup
reports the camera as off, which the evaluator treats as a violation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from .commands import run_command
from .errors import ProbeUnavailable
from .probe import EnvironmentProbe
from .processes import ProcessInfo, find_any, find_process, running_processes
from .types import ConferenceResult

log = logging.getLogger(__name__)


def camera_streaming_active(ioreg_output: str, keys: Sequence[str]) -> Optional[str]:
    """Return the first registry line flagging an active camera stream, or None."""
    for line in ioreg_output.splitlines():
        if any(k in line for k in keys) and "yes" in line.lower():
            return line.strip()
    return None


def holds_compositor_handles(lsof_output: str, markers: Sequence[str]) -> bool:
    lowered = lsof_output.lower()
    return any(m.lower() in lowered for m in markers)


class ConferenceAppProbe(EnvironmentProbe[ConferenceResult]):
    kind = "conference"

    def __init__(
        self,
        process_name: str = "zoom.us",
        camera_keys: Sequence[str] = ("CameraStreaming", "CameraActive"),
        share_helpers: Sequence[str] = ("zoomshare", "CptHost"),
        compositor_markers: Sequence[str] = ("windowserver", "skylight"),
        timeout: float = 10.0,
        process_lister: Callable[[], List[ProcessInfo]] = running_processes,
    ) -> None:
        self._process_name = process_name
        self._camera_keys = tuple(camera_keys)
        self._share_helpers = tuple(share_helpers)
        self._compositor_markers = tuple(compositor_markers)
        self._timeout = timeout
        self._list_processes = process_lister

    async def check(self) -> ConferenceResult:
        try:
            procs = await asyncio.to_thread(self._list_processes)
        except Exception as e:
            log.debug(f"Process table unavailable: {e}")
            return ConferenceResult(evidence="process table unavailable")

        if not find_process(procs, self._process_name):
            return ConferenceResult(evidence=f"{self._process_name} not running")

        camera_line = await self._camera_line()
        sharing = await self._screen_sharing(procs)

        return ConferenceResult(
            running=True,
            camera_active=camera_line is not None,
            screen_sharing=sharing,
            evidence=camera_line or "no camera streaming flag",
        )

    async def _camera_line(self) -> Optional[str]:
        try:
            output = await run_command(["ioreg", "-l"], timeout=self._timeout)
        except ProbeUnavailable as e:
            log.debug(f"Camera lookup failed, treating camera as off: {e}")
            return None
        return camera_streaming_active(output, self._camera_keys)

    async def _screen_sharing(self, procs: List[ProcessInfo]) -> bool:
        if find_any(procs, self._share_helpers):
            return True
        try:
            # lsof exits 1 when some files cannot be listed; the partial output is still useful
            output = await run_command(
                ["lsof", "-c", self._process_name],
                timeout=self._timeout,
                allow_nonzero=True,
            )
        except ProbeUnavailable as e:
            log.debug(f"Screen share fallback failed: {e}")
            return False
        return holds_compositor_handles(output, self._compositor_markers)
