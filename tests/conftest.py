"""
Pytest configuration and shared fakes.

The fakes stand in for the device scan, the capture subprocess and the remote
API so orchestrator tests never touch hardware, processes or the network.
"""

import asyncio

import pytest

from connectcam.adapters.camera.base import DeviceSource, FrameSource
from connectcam.adapters.connect.base import ConnectAdapter
from connectcam.orchestrator.contracts import Ack
from connectcam.orchestrator.errors import CaptureError, RegisterError, UploadError
from connectcam.services.status_store import StatusStore

JPEG = b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9"


class FakeClock:
    """Monotonic clock that only moves when someone sleeps or advances it."""

    def __init__(self, events=None):
        self.now = 1000.0
        self.sleeps = []
        self.events = events if events is not None else []

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.events.append(("sleep", seconds))
        self.now += seconds
        await asyncio.sleep(0)


class ScriptedDevices(DeviceSource):
    def __init__(self, devices, events=None):
        self.devices = list(devices)
        self.calls = 0
        self.events = events if events is not None else []

    async def list_devices(self):
        self.calls += 1
        self.events.append(("list_devices",))
        return list(self.devices)


class ScriptedCamera(FrameSource):
    """Returns frames (or raises) in script order, then repeats the last entry."""

    def __init__(self, script=None, events=None, clock=None, duration=0.0):
        self.script = list(script) if script else [JPEG]
        self.calls = []
        self.events = events if events is not None else []
        self.clock = clock
        self.duration = duration

    async def capture(self, device):
        self.calls.append(device)
        self.events.append(("capture", device))
        item = self.script[min(len(self.calls) - 1, len(self.script) - 1)]
        if self.clock is not None:
            self.clock.advance(self.duration)
        await asyncio.sleep(0)
        if isinstance(item, BaseException):
            raise item
        # distinct object per cycle
        return bytes(item) + len(self.calls).to_bytes(2, "big")


class RecordingConnect(ConnectAdapter):
    def __init__(self, upload_script=None, register_error=None, events=None, clock=None, upload_duration=0.0):
        self.upload_script = list(upload_script) if upload_script else [204]
        self.register_error = register_error
        self.uploads = []
        self.registrations = []
        self.events = events if events is not None else []
        self.clock = clock
        self.upload_duration = upload_duration
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def upload_snapshot(self, frame):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.uploads.append(frame)
            self.events.append(("upload", len(frame)))
            status = self.upload_script[min(len(self.uploads) - 1, len(self.upload_script) - 1)]
            if self.clock is not None:
                self.clock.advance(self.upload_duration)
            await asyncio.sleep(0)
            if status >= 400:
                raise UploadError(f"PUT /c/snapshot failed ({status})", status_code=status, body={})
            return Ack(status_code=status)
        finally:
            self.in_flight -= 1

    async def update_camera_info(self, config):
        self.registrations.append(config)
        self.events.append(("register", config.path))
        if self.register_error is not None:
            raise self.register_error
        return Ack(status_code=200)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def status():
    return StatusStore(echo=False)


@pytest.fixture
def events():
    return []


@pytest.fixture
def clock(events):
    return FakeClock(events)


@pytest.fixture
def capture_error():
    return CaptureError("ffmpeg exited with 1: Device or resource busy", device="/dev/video0")


@pytest.fixture
def register_error():
    return RegisterError("PUT /c/info failed (401): {}", status_code=401, body={})
