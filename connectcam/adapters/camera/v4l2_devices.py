"""
V4L2 device discovery.
Lists /dev/video* nodes, ordered by device number.
"""
import asyncio
import glob
import re
from connectcam.adapters.camera.base import DeviceSource

_NUMBER = re.compile(r"(\d+)$")


def _device_number(path: str) -> tuple[int, str]:
    m = _NUMBER.search(path)
    return (int(m.group(1)) if m else -1, path)


class V4L2DeviceSource(DeviceSource):
    def __init__(self, status_store, pattern: str = "/dev/video*"):
        self.status = status_store
        self.pattern = pattern

    async def list_devices(self) -> list[str]:
        return await asyncio.to_thread(self._scan)

    def _scan(self) -> list[str]:
        try:
            found = glob.glob(self.pattern)
        except OSError as e:
            # a broken scan looks the same as no hardware
            self.status.log(f"v4l2_devices: scan failed: {e}", level="WARN")
            return []
        return sorted(found, key=_device_number)
