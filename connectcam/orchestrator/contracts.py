from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Literal

DriverName = Literal["V4L2"]
TriggerScheme = Literal["THIRTY_SEC"]

DEFAULT_CAMERA_NAME = "Prusa Pi Camera"
DEFAULT_FINGERPRINT = "pi-prusa-cam-device"
DRIVER_V4L2: DriverName = "V4L2"
TRIGGER_THIRTY_SEC: TriggerScheme = "THIRTY_SEC"
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080


@dataclass(frozen=True)
class Credentials:
    token: str
    fingerprint: str = DEFAULT_FINGERPRINT


@dataclass(frozen=True)
class Resolution:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT


@dataclass(frozen=True)
class CameraConfig:
    path: str
    name: str = DEFAULT_CAMERA_NAME
    driver: DriverName = DRIVER_V4L2
    trigger_scheme: TriggerScheme = TRIGGER_THIRTY_SEC
    resolution: Resolution = field(default_factory=Resolution)


@dataclass(frozen=True)
class Ack:
    status_code: int


@dataclass
class CycleResult:
    ok: bool
    started_at: datetime          # UTC, taken before capture
    duration_ms: int
    frame_size: int = 0
    error_code: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None  # remote status on upload failure

    @property
    def timestamp(self) -> str:
        return self.started_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
