from pydantic import BaseModel


class GeneralError(BaseModel):
    message: str
    reposync_error_code: int


class WorkerStatus(BaseModel):
    queue_name: str
    status: str
    last_heartbeat: str | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    workers: list[WorkerStatus]
