"""
Entry point.

    connectcam <token> [camera-index] [interval-seconds]
    python -m connectcam.main <token> ...
"""
import asyncio
import sys
import threading

import uvicorn

from connectcam.adapters.camera.v4l2_devices import V4L2DeviceSource
from connectcam.adapters.connect.http_connect import HttpConnect
from connectcam.adapters.connect.mock_connect import MockConnect
from connectcam.orchestrator.errors import AgentError, ConfigurationError
from connectcam.orchestrator.state_machine import Orchestrator
from connectcam.services.api import create_app
from connectcam.services.config import USAGE, AgentSettings, load_settings
from connectcam.services.status_store import StatusStore


def build_camera(settings: AgentSettings, status: StatusStore):
    if settings.camera_backend == "mock":
        from connectcam.adapters.camera.mock_camera import MockCamera, MockDevices
        status.log("camera backend: mock")
        return MockDevices(status), MockCamera(status, frames_dir=settings.mock_frames_dir)
    if settings.camera_backend == "opencv":
        from connectcam.adapters.camera.cv2_camera import CV2Camera
        status.log("camera backend: opencv")
        return V4L2DeviceSource(status), CV2Camera(status)
    from connectcam.adapters.camera.ffmpeg_camera import FFmpegCamera
    status.log(f"camera backend: ffmpeg ({settings.ffmpeg_bin})")
    return V4L2DeviceSource(status), FFmpegCamera(status, ffmpeg_bin=settings.ffmpeg_bin,
                                                  timeout=settings.capture_timeout)


def build_connect(settings: AgentSettings, status: StatusStore):
    if settings.connect_adapter == "mock":
        status.log("connect adapter: mock")
        return MockConnect(status)
    status.log(f"connect adapter: http -> {settings.base_url}")
    return HttpConnect(status, settings.credentials, base_url=settings.base_url, timeout=settings.http_timeout)


def start_status_server(status: StatusStore, port: int) -> threading.Thread:
    # runs off the event loop thread so uvicorn does not take over signal handling
    server = uvicorn.Server(uvicorn.Config(create_app(status), host="0.0.0.0", port=port, log_level="warning"))
    t = threading.Thread(target=server.run, name="status-api", daemon=True)
    t.start()
    status.log(f"status api: http://0.0.0.0:{port}/status")
    return t


async def run_agent(settings: AgentSettings, status: StatusStore, max_cycles: int | None = None):
    devices, camera = build_camera(settings, status)
    connect = build_connect(settings, status)
    orch = Orchestrator(
        devices=devices,
        camera=camera,
        connect=connect,
        status_store=status,
        camera_index=settings.camera_index,
        interval=settings.interval,
        camera_name=settings.camera_name,
    )
    try:
        await orch.run(max_cycles=max_cycles)
    finally:
        await connect.aclose()


def main(argv: list[str] | None = None) -> int:
    status = StatusStore()
    try:
        settings = load_settings(argv)
    except ConfigurationError as e:
        status.error(str(e))
        print(USAGE, file=sys.stderr)
        return 1

    if settings.status_port:
        start_status_server(status, settings.status_port)

    try:
        asyncio.run(run_agent(settings, status))
    except AgentError as e:
        status.error(str(e))
        return 1
    except KeyboardInterrupt:
        status.log("stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
