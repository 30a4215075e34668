import asyncio
import math
import time
from datetime import datetime, timezone
from enum import Enum

from connectcam.orchestrator.contracts import CameraConfig, CycleResult, DEFAULT_CAMERA_NAME
from connectcam.orchestrator import errors

DEFAULT_INTERVAL = 30
MIN_INTERVAL = 1


class AgentState(str, Enum):
    DISCOVERING = "discovering"
    SELECTING = "selecting"
    REGISTERING = "registering"
    LOOPING = "looping"
    ABORTED = "aborted"


class Orchestrator:
    """
    discover -> select -> register -> loop {capture -> upload}.

    Cycles are serialized: the next one is scheduled only after the previous
    one has finished. Ticks sit on a fixed grid; ticks missed by a slow cycle
    are dropped rather than run back to back.
    """

    def __init__(self, devices, camera, connect, status_store, camera_index: int | None = None,
                 interval: float = DEFAULT_INTERVAL, camera_name: str = DEFAULT_CAMERA_NAME,
                 clock=time.monotonic, sleep=asyncio.sleep):
        self.devices = devices
        self.camera = camera
        self.connect = connect
        self.status = status_store
        self.camera_index = camera_index
        self.interval = max(MIN_INTERVAL, interval)
        self.camera_name = camera_name
        self.device: str | None = None
        self.state = AgentState.DISCOVERING
        self._clock = clock
        self._sleep = sleep

    def _set_state(self, state: AgentState):
        self.state = state
        self.status.set_state(state.value)

    # ---- startup ----

    async def discover(self) -> list[str]:
        self._set_state(AgentState.DISCOVERING)
        found = await self.devices.list_devices()
        if not found:
            self._set_state(AgentState.ABORTED)
            raise errors.DiscoveryError("No video devices found")
        self.status.log(f"Found {len(found)} camera(s):")
        for idx, dev in enumerate(found):
            self.status.log(f"  [{idx}] {dev}")
        return found

    def select(self, found: list[str]) -> str:
        self._set_state(AgentState.SELECTING)
        if self.camera_index is None:
            device = found[0]
        elif 0 <= self.camera_index < len(found):
            device = found[self.camera_index]
        else:
            self._set_state(AgentState.ABORTED)
            raise errors.ConfigurationError(
                f"Invalid camera index: {self.camera_index} ({len(found)} device(s) found)",
                code=errors.ERR_BAD_INDEX,
            )
        self.device = device
        self.status.device = device
        self.status.log(f"Using camera: {device}")
        return device

    async def register(self, device: str) -> bool:
        """Send camera metadata once. Failure is logged and never blocks the loop."""
        self._set_state(AgentState.REGISTERING)
        config = CameraConfig(path=device, name=self.camera_name)
        try:
            await self.connect.update_camera_info(config)
            ok = True
            self.status.log("Camera initialized")
        except errors.RegisterError as e:
            ok = False
            self.status.error(f"Failed to update camera info: {e}")
        except Exception as e:
            ok = False
            self.status.error(f"Failed to update camera info: {type(e).__name__}: {e}")
        self.status.registered = ok
        return ok

    # ---- cycles ----

    async def run_cycle(self) -> CycleResult:
        started_at = datetime.now(timezone.utc)
        # loop() never overlaps cycles; this only stops direct callers of run_cycle
        if self.status.busy:
            self.status.log("cycle skipped: previous cycle still in flight", level="WARN")
            return CycleResult(ok=False, started_at=started_at, duration_ms=0, error_code=errors.ERR_BUSY)

        self.status.set_busy(True)
        t0 = self._clock()
        frame_size = 0
        try:
            frame = await self.camera.capture(self.device)
            frame_size = len(frame)
            ack = await self.connect.upload_snapshot(frame)
            result = CycleResult(ok=True, started_at=started_at, duration_ms=self._elapsed_ms(t0),
                                 frame_size=frame_size, status_code=ack.status_code)
        except errors.CaptureError as e:
            self.status.error(f"Failed to capture from {self.device}: {e}")
            result = CycleResult(ok=False, started_at=started_at, duration_ms=self._elapsed_ms(t0),
                                 error_code=e.code, error=str(e))
        except errors.UploadError as e:
            self.status.error(f"Upload failed: {e}")
            result = CycleResult(ok=False, started_at=started_at, duration_ms=self._elapsed_ms(t0),
                                 frame_size=frame_size, error_code=e.code, error=str(e),
                                 status_code=e.status_code)
        except Exception as e:
            self.status.error(f"cycle error {type(e).__name__}: {e}")
            result = CycleResult(ok=False, started_at=started_at, duration_ms=self._elapsed_ms(t0),
                                 frame_size=frame_size, error_code=errors.ERR_UNKNOWN, error=str(e))
        finally:
            self.status.set_busy(False)

        self.status.record_cycle(result)
        return result

    def _elapsed_ms(self, t0: float) -> int:
        return int((self._clock() - t0) * 1000)

    async def loop(self, max_cycles: int | None = None):
        """Run cycles until cancelled, or until max_cycles have run."""
        self._set_state(AgentState.LOOPING)
        done = 0
        next_due = self._clock()
        while True:
            await self.run_cycle()
            done += 1
            if max_cycles is not None and done >= max_cycles:
                return
            next_due += self.interval
            now = self._clock()
            if now > next_due:
                missed = math.ceil((now - next_due) / self.interval)
                next_due += missed * self.interval
                self.status.log(f"cycle overran the {self.interval}s interval, skipped {missed} tick(s)",
                                level="WARN")
            await self._sleep(next_due - now)

    async def run(self, max_cycles: int | None = None):
        """Full lifecycle. Raises ConfigurationError / DiscoveryError before looping."""
        found = await self.discover()
        device = self.select(found)
        self.status.interval = self.interval
        self.status.log(f"Upload interval: {self.interval}s")
        await self.register(device)
        await self.loop(max_cycles=max_cycles)
