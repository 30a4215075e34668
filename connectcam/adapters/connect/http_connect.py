"""
HTTP adapter for the remote camera API.

  Snapshot:  PUT /c/snapshot   Content-Type: image/jpg, body = raw JPEG
  Metadata:  PUT /c/info       {"config": {...}}
Both calls carry the Token and Fingerprint headers. One attempt per call;
a non-2xx status or transport error is raised to the caller.
"""

import httpx
from connectcam.adapters.connect.base import ConnectAdapter
from connectcam.orchestrator.contracts import Ack, CameraConfig, Credentials
from connectcam.orchestrator.errors import ConnectError, RegisterError, UploadError
from connectcam.services.models import CameraInfoRequest

DEFAULT_BASE_URL = "https://connect.prusa3d.com"
SNAPSHOT_PATH = "/c/snapshot"
INFO_PATH = "/c/info"


def _error_body(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"detail": data}


class HttpConnect(ConnectAdapter):
    def __init__(self, status_store, credentials: Credentials, base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 20.0, transport: httpx.AsyncBaseTransport | None = None):
        self.status = status_store
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    def _headers(self, extra: dict | None = None) -> dict:
        headers = {"Token": self.credentials.token, "Fingerprint": self.credentials.fingerprint}
        if extra:
            headers.update(extra)
        return headers

    async def _put(self, path: str, error_cls: type[ConnectError], **kwargs) -> Ack:
        try:
            resp = await self._client.put(path, **kwargs)
        except httpx.HTTPError as e:
            raise error_cls(f"PUT {path} failed: {type(e).__name__}: {e}") from e
        if not resp.is_success:
            body = _error_body(resp)
            raise error_cls(f"PUT {path} failed ({resp.status_code}): {body}",
                            status_code=resp.status_code, body=body)
        return Ack(status_code=resp.status_code)

    async def upload_snapshot(self, frame: bytes) -> Ack:
        return await self._put(
            SNAPSHOT_PATH, UploadError,
            content=frame,
            headers=self._headers({"Content-Type": "image/jpg"}),
        )

    async def update_camera_info(self, config: CameraConfig) -> Ack:
        payload = CameraInfoRequest.from_config(config)
        return await self._put(
            INFO_PATH, RegisterError,
            json=payload.model_dump(),
            headers=self._headers(),
        )

    async def aclose(self):
        await self._client.aclose()
