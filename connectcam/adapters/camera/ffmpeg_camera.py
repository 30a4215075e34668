"""
Single-shot capture through ffmpeg.

Opens the V4L2 device in MJPEG, grabs exactly one frame and writes it to stdout
as a JPEG still. Every failure mode (missing binary, busy/removed device,
non-zero exit, empty output, timeout) surfaces as CaptureError.
"""
import asyncio
from connectcam.adapters.camera.base import FrameSource
from connectcam.orchestrator.errors import CaptureError


class FFmpegCamera(FrameSource):
    def __init__(self, status_store, ffmpeg_bin: str = "ffmpeg", timeout: float | None = None,
                 quality: int = 5):
        self.status = status_store
        self.ffmpeg_bin = ffmpeg_bin
        self.timeout = timeout
        self.quality = quality

    def command(self, device: str) -> list[str]:
        return [
            self.ffmpeg_bin,
            "-hide_banner", "-loglevel", "error",
            "-f", "v4l2",
            "-input_format", "mjpeg",
            "-i", device,
            "-vframes", "1",
            "-q:v", str(self.quality),
            "-f", "image2",
            "-c:v", "mjpeg",
            "pipe:1",
        ]

    async def capture(self, device: str) -> bytes:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command(device),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CaptureError(f"cannot start {self.ffmpeg_bin}: {e}", device=device) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise CaptureError(f"capture timed out after {self.timeout}s", device=device) from e
        finally:
            if proc.returncode is None:
                try:
                    proc.kill()
                    await proc.wait()
                except ProcessLookupError:
                    pass

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip().splitlines()
            tail = detail[-1] if detail else "no output"
            raise CaptureError(f"ffmpeg exited with {proc.returncode}: {tail}", device=device)
        if not stdout:
            raise CaptureError("ffmpeg produced no image data", device=device)
        return stdout
