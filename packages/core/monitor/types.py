from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Tuple

ProbeKind = Literal["display", "conference", "radio", "peripheral"]


@dataclass(frozen=True)
class DisplayResult:
    display_count: int = 1
    evidence: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class ConferenceResult:
    running: bool = False
    camera_active: bool = False
    screen_sharing: bool = False
    evidence: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class RadioResult:
    enabled: bool = False
    evidence: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class PeripheralResult:
    count: int = 0
    evidence: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """One complete set of probe results taken on the same tick."""
    display: DisplayResult
    conference: ConferenceResult
    radio: RadioResult
    peripheral: PeripheralResult


class ViolationKind(str, Enum):
    # Declaration order is the headline priority
    MULTI_DISPLAY = "MultiDisplay"
    CONFERENCE_APP_NOT_RUNNING = "ConferenceAppNotRunning"
    CAMERA_INACTIVE = "CameraInactive"
    RADIO_ENABLED = "RadioEnabled"
    PERIPHERAL_ATTACHED = "PeripheralAttached"


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    message: str


@dataclass(frozen=True)
class Evaluation:
    violations: Tuple[Violation, ...] = ()

    @property
    def clean(self) -> bool:
        return not self.violations

    @property
    def headline(self) -> Optional[str]:
        return self.violations[0].message if self.violations else None

    @property
    def kinds(self) -> Tuple[ViolationKind, ...]:
        return tuple(v.kind for v in self.violations)


class SessionPhase(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    WARNING = "WARNING"
    TERMINATED = "TERMINATED"
    ENDED = "ENDED"


@dataclass
class SessionState:
    """
    Process-wide session state. Only SessionStateMachine mutates it;
    everyone else gets a copy from snapshot().
    """
    phase: SessionPhase = SessionPhase.IDLE
    started: bool = False
    terminated: bool = False
    showing_warning: bool = False
    active_violation: Optional[Violation] = None
    warnings_issued: int = 0

    def snapshot(self) -> "SessionState":
        return SessionState(
            phase=self.phase,
            started=self.started,
            terminated=self.terminated,
            showing_warning=self.showing_warning,
            active_violation=self.active_violation,
            warnings_issued=self.warnings_issued,
        )


class SessionEventType(str, Enum):
    START_REQUESTED = "START_REQUESTED"
    MONITOR_CHECKED = "MONITOR_CHECKED"
    RESOLVE_CHECKED = "RESOLVE_CHECKED"
    WARNING_EXPIRED = "WARNING_EXPIRED"
    END_REQUESTED = "END_REQUESTED"
    QUIT_REQUESTED = "QUIT_REQUESTED"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    evaluation: Optional[Evaluation] = None
    # WARNING_EXPIRED only: warnings_issued when the countdown that expired was opened
    warning_id: Optional[int] = None


@dataclass
class IntegrityMonitorConfig:
    """Configuration for the integrity monitor and its probes."""
    monitor_interval_ms: int = 2000
    resolve_interval_ms: int = 1000
    command_timeout_seconds: float = 10.0
    conference_process_name: str = "zoom.us"
    camera_registry_keys: Tuple[str, ...] = ("CameraStreaming", "CameraActive")
    screen_share_helpers: Tuple[str, ...] = ("zoomshare", "CptHost")
    compositor_markers: Tuple[str, ...] = ("windowserver", "skylight")
    internal_device_patterns: Optional[Tuple[str, ...]] = None  # None: built-in denylist

    @classmethod
    def from_dict(cls, config: dict) -> "IntegrityMonitorConfig":
        defaults = cls()
        patterns = config.get("internal_device_patterns")
        return cls(
            monitor_interval_ms=config.get("monitor_interval_ms", defaults.monitor_interval_ms),
            resolve_interval_ms=config.get("resolve_interval_ms", defaults.resolve_interval_ms),
            command_timeout_seconds=config.get("command_timeout_seconds", defaults.command_timeout_seconds),
            conference_process_name=config.get("conference_process_name", defaults.conference_process_name),
            camera_registry_keys=tuple(config.get("camera_registry_keys", defaults.camera_registry_keys)),
            screen_share_helpers=tuple(config.get("screen_share_helpers", defaults.screen_share_helpers)),
            compositor_markers=tuple(config.get("compositor_markers", defaults.compositor_markers)),
            internal_device_patterns=tuple(patterns) if patterns is not None else None,
        )
