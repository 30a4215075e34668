from connectcam.adapters.connect.base import ConnectAdapter
from connectcam.orchestrator.contracts import Ack


class MockConnect(ConnectAdapter):
    """Dry-run remote: accepts everything and only logs what would be sent."""

    def __init__(self, status_store):
        self.status = status_store
        self.uploads = 0

    async def upload_snapshot(self, frame: bytes) -> Ack:
        self.uploads += 1
        self.status.log(f"mock_connect: snapshot #{self.uploads} ({len(frame)} bytes)")
        return Ack(status_code=204)

    async def update_camera_info(self, config) -> Ack:
        self.status.log(f"mock_connect: camera info name={config.name!r} path={config.path}")
        return Ack(status_code=200)
