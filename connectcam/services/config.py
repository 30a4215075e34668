"""
Agent configuration.

Positional CLI arguments win over options, options win over environment
variables. The environment is loaded from a .env file first (never overriding
variables that are already set).

    connectcam <token> [camera-index] [interval-seconds]
"""
import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from connectcam.adapters.connect.http_connect import DEFAULT_BASE_URL
from connectcam.orchestrator.contracts import Credentials, DEFAULT_CAMERA_NAME, DEFAULT_FINGERPRINT
from connectcam.orchestrator.errors import ConfigurationError
from connectcam.orchestrator.state_machine import DEFAULT_INTERVAL, MIN_INTERVAL

USAGE = "Usage: connectcam <token> [camera-index] [interval-seconds]"

CAMERA_BACKENDS = ("ffmpeg", "opencv", "mock")
CONNECT_ADAPTERS = ("http", "mock")


@dataclass(frozen=True)
class AgentSettings:
    credentials: Credentials
    camera_index: Optional[int] = None
    interval: int = DEFAULT_INTERVAL
    base_url: str = DEFAULT_BASE_URL
    camera_name: str = DEFAULT_CAMERA_NAME
    camera_backend: str = "ffmpeg"
    connect_adapter: str = "http"
    ffmpeg_bin: str = "ffmpeg"
    capture_timeout: Optional[float] = None
    http_timeout: float = 20.0
    status_port: Optional[int] = None
    mock_frames_dir: Optional[str] = None


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def parse_interval(value) -> int:
    """Seconds between cycles. Unset -> 30, below 1 -> 1."""
    if _blank(value):
        return DEFAULT_INTERVAL
    try:
        seconds = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid interval: {value!r}")
    return max(MIN_INTERVAL, seconds)


def parse_camera_index(value) -> Optional[int]:
    """Zero-based index, or None to take the first device. Range is checked at selection."""
    if _blank(value):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"Invalid camera index: {value}")


def _optional_float(name: str, value) -> Optional[float]:
    if _blank(value):
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {value!r}")


def _positive_float(name: str, value) -> Optional[float]:
    seconds = _optional_float(name, value)
    if seconds is not None and seconds <= 0:
        raise ConfigurationError(f"Invalid {name}: {value!r} (must be greater than 0)")
    return seconds


def _optional_int(name: str, value) -> Optional[int]:
    if _blank(value):
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {value!r}")


def _choice(name: str, value: str, choices: tuple) -> str:
    value = value.strip().lower()
    if value not in choices:
        raise ConfigurationError(f"Invalid {name}: {value!r} (expected one of {', '.join(choices)})")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="connectcam",
        description="Capture a still from a local camera on a fixed interval and upload it.",
    )
    p.add_argument("token", nargs="?", help="API token (or CONNECT_TOKEN)")
    p.add_argument("camera_index", nargs="?", help="zero-based camera index (or CAMERA_INDEX)")
    p.add_argument("interval", nargs="?", help="seconds between snapshots (or SNAPSHOT_INTERVAL)")
    p.add_argument("--base-url", help="remote API base (or CONNECT_BASE_URL)")
    p.add_argument("--camera-backend", help="ffmpeg | opencv | mock (or CAMERA_BACKEND)")
    p.add_argument("--connect", dest="connect_adapter", help="http | mock (or CONNECT_ADAPTER)")
    p.add_argument("--status-port", help="serve the status API on this port (or STATUS_PORT)")
    p.add_argument("--env-file", default=".env", help="dotenv file to load (default: .env)")
    return p


def load_settings(argv: list[str] | None = None, env: Mapping[str, str] | None = None) -> AgentSettings:
    args = build_parser().parse_intermixed_args(argv)
    if env is None:
        load_dotenv(dotenv_path=args.env_file, override=False)
        env = os.environ

    token = args.token or env.get("CONNECT_TOKEN", "")
    if _blank(token):
        raise ConfigurationError("Missing API token")

    credentials = Credentials(
        token=token.strip(),
        fingerprint=env.get("CONNECT_FINGERPRINT") or DEFAULT_FINGERPRINT,
    )
    http_timeout = _positive_float("http timeout", env.get("HTTP_TIMEOUT"))
    index_raw = args.camera_index if not _blank(args.camera_index) else env.get("CAMERA_INDEX")
    interval_raw = args.interval if not _blank(args.interval) else env.get("SNAPSHOT_INTERVAL")

    return AgentSettings(
        credentials=credentials,
        camera_index=parse_camera_index(index_raw),
        interval=parse_interval(interval_raw),
        base_url=args.base_url or env.get("CONNECT_BASE_URL") or DEFAULT_BASE_URL,
        camera_name=env.get("CAMERA_NAME") or DEFAULT_CAMERA_NAME,
        camera_backend=_choice("camera backend", args.camera_backend or env.get("CAMERA_BACKEND") or "ffmpeg",
                               CAMERA_BACKENDS),
        connect_adapter=_choice("connect adapter", args.connect_adapter or env.get("CONNECT_ADAPTER") or "http",
                                CONNECT_ADAPTERS),
        ffmpeg_bin=env.get("FFMPEG_BIN") or "ffmpeg",
        capture_timeout=_positive_float("capture timeout", env.get("CAPTURE_TIMEOUT")),
        http_timeout=http_timeout if http_timeout is not None else 20.0,
        status_port=_optional_int("status port", args.status_port or env.get("STATUS_PORT")),
        mock_frames_dir=env.get("MOCK_FRAMES_DIR") or None,
    )
