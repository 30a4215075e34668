from datetime import datetime
from pydantic import BaseModel
from typing import Literal, Optional

from connectcam.orchestrator.contracts import CameraConfig, CycleResult


# Wire format of PUT /c/info
class ResolutionIn(BaseModel):
    width: int
    height: int

class CameraInfoConfig(BaseModel):
    name: str
    path: str
    driver: Literal["V4L2"] = "V4L2"
    trigger_scheme: Literal["THIRTY_SEC"] = "THIRTY_SEC"
    resolution: ResolutionIn

class CameraInfoRequest(BaseModel):
    config: CameraInfoConfig

    @classmethod
    def from_config(cls, cfg: CameraConfig) -> "CameraInfoRequest":
        return cls(config=CameraInfoConfig(
            name=cfg.name,
            path=cfg.path,
            driver=cfg.driver,
            trigger_scheme=cfg.trigger_scheme,
            resolution=ResolutionIn(width=cfg.resolution.width, height=cfg.resolution.height),
        ))


# Local status API
class CycleOut(BaseModel):
    ok: bool
    started_at: datetime
    duration_ms: int
    frame_size: int = 0
    error_code: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def from_result(cls, r: CycleResult) -> "CycleOut":
        return cls(
            ok=r.ok, started_at=r.started_at, duration_ms=r.duration_ms, frame_size=r.frame_size,
            error_code=r.error_code, error=r.error, status_code=r.status_code,
        )

class StatusResponse(BaseModel):
    state: str
    busy: bool
    device: Optional[str] = None
    interval: Optional[float] = None
    registered: Optional[bool] = None   # None until registration has been attempted
    cycles_ok: int = 0
    cycles_failed: int = 0
    last_cycle: Optional[CycleOut] = None
    logs: list[str]

class HealthResponse(BaseModel):
    ok: bool
    state: str
    last_ok: Optional[bool] = None
