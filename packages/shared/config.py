from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field


DEFAULT_INTERNAL_DEVICE_PATTERNS = [
    "hub", "internal", "built-in", "bluetooth", "apple",
    "host controller", "root hub", "usb bus", "usb 3", "usb 2", "usb3", "usb2",
    "bus", "touch bar", "ambient light sensor", "facetime", "headset",
    "card reader", "trackpad", "keyboard", "ibridge", "sensor", "controller",
]


class AppConfig(BaseModel):
    monitor_interval_ms: int = Field(default=2000, ge=100)
    resolve_interval_ms: int = Field(default=1000, ge=100)
    warning_grace_seconds: int = Field(default=10, ge=1)
    command_timeout_seconds: float = 10.0

    conference_process_name: str = "zoom.us"
    camera_registry_keys: List[str] = Field(default_factory=lambda: ["CameraStreaming", "CameraActive"])
    screen_share_helpers: List[str] = Field(default_factory=lambda: ["zoomshare", "CptHost"])
    compositor_markers: List[str] = Field(default_factory=lambda: ["windowserver", "skylight"])
    internal_device_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_INTERNAL_DEVICE_PATTERNS))

    def to_monitor_config(self) -> dict:
        return {
            "monitor_interval_ms": self.monitor_interval_ms,
            "resolve_interval_ms": self.resolve_interval_ms,
            "command_timeout_seconds": self.command_timeout_seconds,
            "conference_process_name": self.conference_process_name,
            "camera_registry_keys": list(self.camera_registry_keys),
            "screen_share_helpers": list(self.screen_share_helpers),
            "compositor_markers": list(self.compositor_markers),
            "internal_device_patterns": list(self.internal_device_patterns),
        }
