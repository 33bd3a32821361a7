from unittest.mock import AsyncMock, patch

import httpx

from reposync.server.main import get_application
from reposync.worker.redis import WorkerHealth


async def get_health(statuses):
    app = get_application()
    health = AsyncMock(
        side_effect=lambda queue_name: WorkerHealth(
            status=statuses.get(queue_name, "HEALTHY"),
            last_heartbeat=None,
            details=None,
        )
    )

    with patch("reposync.server.main.get_worker_health", health):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.get("/api/v1/health")


async def test_healthy_when_every_queue_has_a_worker():
    response = await get_health({})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "HEALTHY"
    assert [worker["queue_name"] for worker in body["workers"]] == [
        "arq:queue",
        "arq:dependencies",
        "arq:tags",
        "arq:usage",
    ]


async def test_unhealthy_when_a_queue_has_no_worker():
    response = await get_health({"arq:tags": "UNHEALTHY"})

    assert response.status_code == 503
    assert response.json()["detail"]["status"] == "UNHEALTHY"
