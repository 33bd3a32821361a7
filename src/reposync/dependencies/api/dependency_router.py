from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends

from reposync.dependencies.api.dependency_models import DependencyJobRecorded
from reposync.dependencies.job_models import ParseJob
from reposync.main.container.container import Container
from reposync.main.logging import get_logger
from reposync.server.dependencies.container import get_container

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/{id}/dependency-job",
    response_model=DependencyJobRecorded,
)
async def record_dependency_job(
    id: UUID,
    payload: dict[str, Any] = Body(...),
    container: Container = Depends(get_container()),
):
    """Completion callback from the parsing service.

    The payload is recorded exactly as the result of a status poll would be.
    """
    job = ParseJob.from_payload(payload)

    repository_repo = container.repository_repo()
    repository = await repository_repo.get(id, for_update=True)

    outcome = await container.dependency_parsing_service().record_job(repository, job)
    logger.info(
        "Recorded dependency job callback",
        extra={
            "repository": repository.full_name,
            "dependency_job_id": job.id,
            "outcome": outcome.value,
        },
    )

    return DependencyJobRecorded(
        repository_id=repository.id,
        outcome=outcome,
        dependency_job_id=repository.dependency_job_id,
    )
