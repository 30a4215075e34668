"""Mock devices and camera for running without hardware.

MockCamera serves a random .jpg from frames_dir when one is given, otherwise a
synthetic test pattern stamped with the device and time.
"""
import random
from datetime import datetime, timezone
from pathlib import Path

import cv2
import numpy as np

from connectcam.adapters.camera.base import DeviceSource, FrameSource
from connectcam.orchestrator.errors import CaptureError


class MockDevices(DeviceSource):
    def __init__(self, status_store, devices: list[str] | None = None):
        self.status = status_store
        self.devices = list(devices) if devices is not None else ["/dev/video0"]

    async def list_devices(self) -> list[str]:
        self.status.log(f"mock_devices: {len(self.devices)} device(s)")
        return list(self.devices)


class MockCamera(FrameSource):
    def __init__(self, status_store, frames_dir: str | Path | None = None, width: int = 640, height: int = 360):
        self.status = status_store
        self.frames_dir = Path(frames_dir) if frames_dir else None
        self.width = width
        self.height = height

    async def capture(self, device: str) -> bytes:
        if self.frames_dir is not None:
            jpegs = sorted(self.frames_dir.glob("*.jpg"))
            if not jpegs:
                raise CaptureError(f"no .jpg files in {self.frames_dir}", device=device)
            chosen = random.choice(jpegs)
            self.status.log(f"mock_camera: serving {chosen.name}")
            return chosen.read_bytes()
        return self._test_pattern(device)

    def _test_pattern(self, device: str) -> bytes:
        bars = np.array(
            [[255, 255, 255], [0, 255, 255], [255, 255, 0], [0, 255, 0],
             [255, 0, 255], [0, 0, 255], [255, 0, 0]],
            dtype=np.uint8,
        )
        cols = np.arange(self.width) * len(bars) // self.width
        img = np.ascontiguousarray(np.broadcast_to(bars[cols], (self.height, self.width, 3)))
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        cv2.putText(img, device, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 2)
        cv2.putText(img, stamp, (10, self.height - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 2)
        ok, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, 85])
        if not ok:
            raise CaptureError("jpeg encode failed", device=device)
        return bytes(buf)
