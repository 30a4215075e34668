"""
Fake remote API for running the agent without the real service.

Accepts PUT /c/snapshot and PUT /c/info with the same headers the agent
sends, keeps the last snapshot in memory and serves it at GET /last.jpg.
Set FAKE_FAIL_EVERY=N to answer every Nth snapshot with a 503.

Usage:
    python -m connectcam.scripts.fake_connect_server
    CONNECT_BASE_URL=http://127.0.0.1:9000 connectcam some-token
"""

import os
import uvicorn
from fastapi import FastAPI, Header, Request, Response
from fastapi.responses import JSONResponse

from connectcam.services.models import CameraInfoRequest

app = FastAPI(title="fake-connect-server")
app.state.snapshots = 0
app.state.last_snapshot = b""
app.state.camera_info = None
app.state.fail_every = int(os.getenv("FAKE_FAIL_EVERY", "0"))


def _unauthorized(token: str | None, fingerprint: str | None) -> JSONResponse | None:
    if not token or not fingerprint:
        return JSONResponse({"code": "UNAUTHORIZED", "message": "Token and Fingerprint headers required"},
                            status_code=401)
    return None


@app.put("/c/snapshot")
async def snapshot(request: Request, token: str | None = Header(None), fingerprint: str | None = Header(None)):
    denied = _unauthorized(token, fingerprint)
    if denied:
        return denied
    body = await request.body()
    if not body:
        return JSONResponse({"code": "BAD_REQUEST", "message": "empty snapshot"}, status_code=400)
    app.state.snapshots += 1
    n = app.state.snapshots
    if app.state.fail_every and n % app.state.fail_every == 0:
        print(f"[connect] snapshot #{n} rejected (simulated)")
        return JSONResponse({"code": "SERVICE_UNAVAILABLE", "message": "simulated failure"}, status_code=503)
    app.state.last_snapshot = body
    print(f"[connect] snapshot #{n} {len(body)} bytes from {fingerprint}")
    return Response(status_code=204)


@app.put("/c/info")
async def info(payload: CameraInfoRequest, token: str | None = Header(None), fingerprint: str | None = Header(None)):
    denied = _unauthorized(token, fingerprint)
    if denied:
        return denied
    app.state.camera_info = payload
    print(f"[connect] camera info {payload.config.name!r} {payload.config.path}")
    return {"ok": True}


@app.get("/last.jpg")
async def last_jpg():
    if not app.state.last_snapshot:
        return Response(status_code=404)
    return Response(app.state.last_snapshot, media_type="image/jpeg")


if __name__ == "__main__":
    print("Fake connect server starting on http://localhost:9000")
    uvicorn.run(app, host="0.0.0.0", port=9000)
