"""
OpenCV capture backend.
Opens the device per call, grabs one frame and releases it, so the device is
never held between cycles.
"""
import asyncio
import cv2
from connectcam.adapters.camera.base import FrameSource
from connectcam.orchestrator.errors import CaptureError


class CV2Camera(FrameSource):
    def __init__(self, status_store, quality: int = 85, width: int | None = None, height: int | None = None):
        self.status = status_store
        self.quality = quality
        self.width = width
        self.height = height

    async def capture(self, device: str) -> bytes:
        return await asyncio.to_thread(self._grab, device)

    def _grab(self, device: str) -> bytes:
        cap = cv2.VideoCapture(device, cv2.CAP_V4L2)
        try:
            if not cap.isOpened():
                raise CaptureError(f"failed to open {device}", device=device)
            cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*"MJPG"))
            if self.width and self.height:
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            ret, frame = cap.read()
            if not ret or frame is None:
                raise CaptureError(f"frame read failed on {device}", device=device)
            ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self.quality])
            if not ok:
                raise CaptureError("jpeg encode failed", device=device)
            return bytes(buf)
        finally:
            cap.release()
