from typing import TYPE_CHECKING
from uuid import UUID

from reposync.dispatch.categories import WorkCategory, WorkCategoryName

if TYPE_CHECKING:
    from reposync.repositories.repository_repo import RepositoryRepository


class CandidateSelector:
    """Picks the next bounded batch of repositories for a work category."""

    def __init__(self, repository_repo: "RepositoryRepository"):
        self.repository_repo = repository_repo

    async def select_batch(self, category: WorkCategory, limit: int) -> list[UUID]:
        """Repositories eligible for new work, never more than ``limit``.

        For dependency parsing this excludes every repository that already
        has an outstanding job handle.
        """
        if limit <= 0:
            return []

        match category.name:
            case WorkCategoryName.DEPENDENCY_PARSING:
                ids = await self.repository_repo.get_unparsed_ids(limit)
            case WorkCategoryName.TAG_DOWNLOAD:
                ids = await self.repository_repo.get_ids_by_tags_synced(limit)
            case WorkCategoryName.USAGE_UPDATE:
                ids = await self.repository_repo.get_ids_by_usage_updated(limit)
            case WorkCategoryName.METADATA_REFRESH:
                ids = await self.repository_repo.get_ids_without_metadata(limit)
            case _:
                raise ValueError(f"Unknown work category {category.name!r}")

        return ids[:limit]

    async def select_in_flight(self, category: WorkCategory, limit: int) -> list[UUID]:
        """Repositories with outstanding external work that needs a status check."""
        if limit <= 0 or category.name != WorkCategoryName.DEPENDENCY_PARSING:
            return []

        ids = await self.repository_repo.get_pending_job_ids(limit)
        return ids[:limit]
