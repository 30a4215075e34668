"""Error codes and exceptions shared by adapters and the orchestrator.

Config and discovery errors are fatal and end the process. Capture, upload and
register errors are caught by the orchestrator and only logged.
"""

ERR_CONFIG = "ERR_CONFIG"
ERR_BAD_INDEX = "ERR_BAD_INDEX"
ERR_NO_DEVICE = "ERR_NO_DEVICE"
ERR_CAPTURE = "ERR_CAPTURE"
ERR_UPLOAD = "ERR_UPLOAD"
ERR_REGISTER = "ERR_REGISTER"
ERR_BUSY = "ERR_BUSY"
ERR_UNKNOWN = "ERR_UNKNOWN"


class AgentError(Exception):
    code = ERR_UNKNOWN

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigurationError(AgentError):
    code = ERR_CONFIG


class DiscoveryError(AgentError):
    code = ERR_NO_DEVICE


class CaptureError(AgentError):
    code = ERR_CAPTURE

    def __init__(self, message: str, device: str | None = None):
        super().__init__(message)
        self.device = device


class ConnectError(AgentError):
    """Remote call failed. status_code is None for transport-level errors."""

    def __init__(self, message: str, status_code: int | None = None, body: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body if body is not None else {}


class UploadError(ConnectError):
    code = ERR_UPLOAD


class RegisterError(ConnectError):
    code = ERR_REGISTER
