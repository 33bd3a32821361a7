from dataclasses import dataclass
from enum import Enum

from reposync.jobs.task_models import Task
from reposync.main.config import Settings, get_settings


class WorkCategoryName(str, Enum):
    DEPENDENCY_PARSING = "dependency-parsing"
    TAG_DOWNLOAD = "tag-download"
    USAGE_UPDATE = "usage-update"
    METADATA_REFRESH = "metadata-refresh"


@dataclass(frozen=True)
class WorkCategory:
    """One kind of background work and the queue it is admitted into."""

    name: WorkCategoryName
    queue_name: str
    ceiling: int
    batch_size: int
    task: Task

    def job_id(self, repository_id) -> str:
        """Deterministic arq job id; arq will not enqueue the same id twice."""
        return f"{self.task.value}:{repository_id}"


def work_categories(settings: Settings | None = None) -> dict[WorkCategoryName, WorkCategory]:
    settings = settings or get_settings()

    return {
        WorkCategoryName.DEPENDENCY_PARSING: WorkCategory(
            name=WorkCategoryName.DEPENDENCY_PARSING,
            queue_name=settings.dependencies_queue_name,
            ceiling=settings.dependencies_queue_ceiling,
            batch_size=settings.dependencies_batch_size,
            task=Task.PARSE_DEPENDENCIES,
        ),
        WorkCategoryName.TAG_DOWNLOAD: WorkCategory(
            name=WorkCategoryName.TAG_DOWNLOAD,
            queue_name=settings.tags_queue_name,
            ceiling=settings.tags_queue_ceiling,
            batch_size=settings.tags_batch_size,
            task=Task.DOWNLOAD_TAGS,
        ),
        WorkCategoryName.USAGE_UPDATE: WorkCategory(
            name=WorkCategoryName.USAGE_UPDATE,
            queue_name=settings.usage_queue_name,
            ceiling=settings.usage_queue_ceiling,
            batch_size=settings.usage_batch_size,
            task=Task.UPDATE_PACKAGE_USAGE,
        ),
        WorkCategoryName.METADATA_REFRESH: WorkCategory(
            name=WorkCategoryName.METADATA_REFRESH,
            queue_name=settings.metadata_queue_name,
            ceiling=settings.metadata_queue_ceiling,
            batch_size=settings.metadata_batch_size,
            task=Task.UPDATE_METADATA_FILES,
        ),
    }
