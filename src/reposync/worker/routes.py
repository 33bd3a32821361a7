from dataclasses import asdict
from datetime import timedelta

from reposync.dispatch.categories import WorkCategoryName
from reposync.jobs.task_models import RepositoryTaskParams
from reposync.main.config import get_settings
from reposync.main.container.container import Container
from reposync.main.logging import get_logger
from reposync.worker.worker import Worker

logger = get_logger(__name__)

worker = Worker()


@worker.function()
async def parse_dependencies(
    job_id: str, params: RepositoryTaskParams, container: Container
):
    service = container.dependency_parsing_service()
    outcome = await service.parse_dependencies(params.repository_id)
    return outcome.value


@worker.function()
async def download_tags(job_id: str, params: RepositoryTaskParams, container: Container):
    return await container.tag_service().download_tags(params.repository_id)


@worker.function()
async def update_package_usage(
    job_id: str, params: RepositoryTaskParams, container: Container
):
    return await container.package_usage_service().update_package_usage(
        params.repository_id
    )


@worker.function()
async def update_metadata_files(
    job_id: str, params: RepositoryTaskParams, container: Container
):
    return await container.metadata_service().update_metadata_files(
        params.repository_id
    )


async def _dispatch(container: Container, name: WorkCategoryName):
    if not get_settings().dispatch_enabled:
        logger.debug("Dispatch disabled, skipping", extra={"category": name.value})
        return None

    category = container.work_categories()[name]
    result = await container.dispatcher().dispatch(category)
    return asdict(result)


@worker.cron_job(minute=set(range(0, 60, 10)))
async def dispatch_dependency_parsing(container: Container):
    """Every 10 minutes: poll in-flight parse jobs and submit new repositories."""
    return await _dispatch(container, WorkCategoryName.DEPENDENCY_PARSING)


@worker.cron_job(minute=5)
async def dispatch_tag_downloads(container: Container):
    return await _dispatch(container, WorkCategoryName.TAG_DOWNLOAD)


@worker.cron_job(minute=15)
async def dispatch_usage_updates(container: Container):
    return await _dispatch(container, WorkCategoryName.USAGE_UPDATE)


@worker.cron_job(minute={20, 50})
async def dispatch_metadata_refresh(container: Container):
    return await _dispatch(container, WorkCategoryName.METADATA_REFRESH)


@worker.cron_job(minute=30)
async def clear_abandoned_dependency_jobs(container: Container):
    """Hourly: forget parse jobs that never came back so the repository is resubmitted."""
    max_age = timedelta(hours=get_settings().dependency_job_max_age_hours)
    return await container.dependency_parsing_service().clear_abandoned_jobs(max_age)
