from abc import ABC, abstractmethod


class DeviceSource(ABC):
    @abstractmethod
    async def list_devices(self) -> list[str]:
        """Return capture device paths in discovery order. Empty list means no hardware."""
        ...


class FrameSource(ABC):
    @abstractmethod
    async def capture(self, device: str) -> bytes:
        """Capture one still from device. Returns JPEG bytes or raises CaptureError."""
        ...
