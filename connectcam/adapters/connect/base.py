class ConnectAdapter:
    async def upload_snapshot(self, frame: bytes):
        """PUT one JPEG frame. Returns Ack, raises UploadError."""
        raise NotImplementedError

    async def update_camera_info(self, config):
        """PUT camera metadata. Returns Ack, raises RegisterError."""
        raise NotImplementedError

    async def aclose(self):
        pass
