"""Tests for the ffmpeg and OpenCV capture backends, without real devices."""

import asyncio
from unittest.mock import MagicMock

import numpy as np
import pytest

from connectcam.adapters.camera import cv2_camera
from connectcam.adapters.camera.ffmpeg_camera import FFmpegCamera
from connectcam.orchestrator.errors import CaptureError


class FakeProcess:
    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self._stdout = stdout
        self._stderr = stderr
        self._final = returncode
        self._hang = hang
        self.returncode = None
        self.killed = False
        self.waited = False

    async def communicate(self):
        if self._hang:
            await asyncio.sleep(3600)
        self.returncode = self._final
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        self.waited = True
        return self.returncode


def patch_spawn(monkeypatch, proc=None, error=None):
    calls = []

    async def fake_exec(*args, **kwargs):
        calls.append(args)
        if error is not None:
            raise error
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    return calls


class TestFFmpegCamera:

    def test_command_requests_one_mjpeg_frame(self, status):
        cmd = FFmpegCamera(status).command("/dev/video2")
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-f") + 1] == "v4l2"
        assert cmd[cmd.index("-input_format") + 1] == "mjpeg"
        assert cmd[cmd.index("-i") + 1] == "/dev/video2"
        assert cmd[cmd.index("-vframes") + 1] == "1"
        assert cmd[cmd.index("-c:v") + 1] == "mjpeg"
        assert cmd[-1] == "pipe:1"

    @pytest.mark.asyncio
    async def test_returns_stdout(self, status, monkeypatch):
        calls = patch_spawn(monkeypatch, FakeProcess(stdout=b"\xff\xd8jpeg"))
        data = await FFmpegCamera(status, ffmpeg_bin="/usr/bin/ffmpeg").capture("/dev/video0")

        assert data == b"\xff\xd8jpeg"
        assert calls[0][0] == "/usr/bin/ffmpeg"
        assert "/dev/video0" in calls[0]

    @pytest.mark.asyncio
    async def test_missing_binary(self, status, monkeypatch):
        patch_spawn(monkeypatch, error=FileNotFoundError("ffmpeg"))
        with pytest.raises(CaptureError, match="cannot start"):
            await FFmpegCamera(status).capture("/dev/video0")

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, status, monkeypatch):
        proc = FakeProcess(stderr=b"[video4linux2] ioctl failed\n/dev/video0: Device or resource busy\n",
                           returncode=1)
        patch_spawn(monkeypatch, proc)

        with pytest.raises(CaptureError) as exc:
            await FFmpegCamera(status).capture("/dev/video0")

        assert "exited with 1" in str(exc.value)
        assert "resource busy" in str(exc.value)
        assert exc.value.device == "/dev/video0"

    @pytest.mark.asyncio
    async def test_empty_output(self, status, monkeypatch):
        patch_spawn(monkeypatch, FakeProcess(stdout=b""))
        with pytest.raises(CaptureError, match="no image data"):
            await FFmpegCamera(status).capture("/dev/video0")

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, status, monkeypatch):
        proc = FakeProcess(hang=True)
        patch_spawn(monkeypatch, proc)

        with pytest.raises(CaptureError, match="timed out"):
            await FFmpegCamera(status, timeout=0.01).capture("/dev/video0")

        assert proc.killed
        assert proc.waited

    @pytest.mark.asyncio
    async def test_cancel_kills_process(self, status, monkeypatch):
        proc = FakeProcess(hang=True)
        patch_spawn(monkeypatch, proc)

        task = asyncio.create_task(FFmpegCamera(status).capture("/dev/video0"))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert proc.killed
        assert proc.waited


class TestCV2Camera:

    def fake_capture(self, opened=True, frame=None):
        cap = MagicMock()
        cap.isOpened.return_value = opened
        cap.read.return_value = (frame is not None, frame)
        return cap

    @pytest.mark.asyncio
    async def test_grabs_and_releases(self, status, monkeypatch):
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        cap = self.fake_capture(frame=frame)
        monkeypatch.setattr(cv2_camera.cv2, "VideoCapture", MagicMock(return_value=cap))

        data = await cv2_camera.CV2Camera(status).capture("/dev/video0")

        assert data[:2] == b"\xff\xd8"
        cap.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_unopened_device(self, status, monkeypatch):
        cap = self.fake_capture(opened=False)
        monkeypatch.setattr(cv2_camera.cv2, "VideoCapture", MagicMock(return_value=cap))

        with pytest.raises(CaptureError, match="failed to open"):
            await cv2_camera.CV2Camera(status).capture("/dev/video9")
        cap.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_read_failure(self, status, monkeypatch):
        cap = self.fake_capture(frame=None)
        monkeypatch.setattr(cv2_camera.cv2, "VideoCapture", MagicMock(return_value=cap))

        with pytest.raises(CaptureError, match="read failed"):
            await cv2_camera.CV2Camera(status).capture("/dev/video0")
