from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from reposync.main.config import get_settings
from reposync.main.logging import get_logger
from reposync.server.dependencies.lifespan import lifespan
from reposync.server.exception_handlers import add_exception_handlers
from reposync.server.models.api import HealthResponse, WorkerStatus
from reposync.server.routers import router as api_router
from reposync.worker.redis import get_worker_health

logger = get_logger(__name__)


def _queue_names() -> list[str]:
    settings = get_settings()
    return list(
        dict.fromkeys(
            [
                settings.metadata_queue_name,
                settings.dependencies_queue_name,
                settings.tags_queue_name,
                settings.usage_queue_name,
            ]
        )
    )


def get_application():
    settings = get_settings()
    app = FastAPI(title="reposync", lifespan=lifespan)

    app.include_router(api_router, prefix=settings.api_prefix)

    # Add handlers of all errors except 500
    add_exception_handlers(app)

    @app.exception_handler(500)
    async def custom_http_500_exception_handler(request, exc):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            extra={"path": request.url.path},
        )
        return JSONResponse(status_code=500, content={"error": "Something went wrong"})

    @app.get(f"{settings.api_prefix}/health", response_model=HealthResponse)
    async def get_health():
        workers = []
        for queue_name in _queue_names():
            health = await get_worker_health(queue_name)
            workers.append(
                WorkerStatus(
                    queue_name=queue_name,
                    status=health.status,
                    last_heartbeat=health.last_heartbeat,
                    details=health.details,
                )
            )

        healthy = all(worker.status == "HEALTHY" for worker in workers)
        response = HealthResponse(
            status="HEALTHY" if healthy else "UNHEALTHY",
            timestamp=datetime.now(timezone.utc).isoformat(),
            workers=workers,
        )

        if not healthy:
            raise HTTPException(status_code=503, detail=response.model_dump())

        return response

    return app


app = get_application()


def start():
    uvicorn.run(
        "reposync.server.main:app",
        host="0.0.0.0",
        port=8123,
        reload=True,
        reload_dirs="./src/",
    )
