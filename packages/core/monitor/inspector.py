from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .conference_probe import ConferenceAppProbe
from .display_probe import DisplayProbe
from .peripheral_probe import UsbPeripheralProbe
from .probe import EnvironmentProbe
from .radio_probe import BluetoothProbe
from .types import (
    ConferenceResult,
    DisplayResult,
    EnvironmentSnapshot,
    IntegrityMonitorConfig,
    PeripheralResult,
    RadioResult,
)

log = logging.getLogger(__name__)


class EnvironmentInspector:
    """
    Runs the four probes concurrently and hands back a complete snapshot.
    A cancelled inspection produces nothing, never a partial snapshot.
    """

    def __init__(
        self,
        display: EnvironmentProbe[DisplayResult],
        conference: EnvironmentProbe[ConferenceResult],
        radio: EnvironmentProbe[RadioResult],
        peripheral: EnvironmentProbe[PeripheralResult],
    ) -> None:
        self.display = display
        self.conference = conference
        self.radio = radio
        self.peripheral = peripheral

    @classmethod
    def from_config(
        cls,
        cfg: IntegrityMonitorConfig,
        display_counter: Optional[Callable[[], int]] = None,
    ) -> "EnvironmentInspector":
        timeout = cfg.command_timeout_seconds
        if cfg.internal_device_patterns is not None:
            peripheral = UsbPeripheralProbe(cfg.internal_device_patterns, timeout=timeout)
        else:
            peripheral = UsbPeripheralProbe(timeout=timeout)

        return cls(
            display=DisplayProbe(counter=display_counter, timeout=timeout),
            conference=ConferenceAppProbe(
                process_name=cfg.conference_process_name,
                camera_keys=cfg.camera_registry_keys,
                share_helpers=cfg.screen_share_helpers,
                compositor_markers=cfg.compositor_markers,
                timeout=timeout,
            ),
            radio=BluetoothProbe(timeout=timeout),
            peripheral=peripheral,
        )

    async def inspect(self) -> EnvironmentSnapshot:
        display, conference, radio, peripheral = await asyncio.gather(
            self.display.check(),
            self.conference.check(),
            self.radio.check(),
            self.peripheral.check(),
        )
        snapshot = EnvironmentSnapshot(
            display=display,
            conference=conference,
            radio=radio,
            peripheral=peripheral,
        )
        log.debug("Inspection: %s", snapshot)
        return snapshot
