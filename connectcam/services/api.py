from fastapi import FastAPI

from connectcam.services.models import CycleOut, HealthResponse, StatusResponse
from connectcam.services.status_store import StatusStore


def create_app(status: StatusStore) -> FastAPI:
    """Read-only view of the agent. Never drives captures itself."""
    app = FastAPI(title="connectcam status")

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        last = status.last_cycle
        return StatusResponse(
            state=status.state,
            busy=status.busy,
            device=status.device,
            interval=status.interval,
            registered=status.registered,
            cycles_ok=status.cycles_ok,
            cycles_failed=status.cycles_failed,
            last_cycle=CycleOut.from_result(last) if last else None,
            logs=list(status.logs),
        )

    @app.get("/health", response_model=HealthResponse)
    def health():
        last = status.last_cycle
        return HealthResponse(
            ok=status.state != "aborted",
            state=status.state,
            last_ok=last.ok if last else None,
        )

    return app
