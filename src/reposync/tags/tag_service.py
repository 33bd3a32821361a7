from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID

from reposync.main.exceptions import HostError
from reposync.main.logging import get_logger

if TYPE_CHECKING:
    from reposync.hosts.host_adapters import HostAdapterFactory
    from reposync.repositories.repository_repo import RepositoryRepository
    from reposync.tags.git_tags import GitTagFetcher
    from reposync.tags.tag_repo import TagRepository

logger = get_logger(__name__)


class TagService:
    def __init__(
        self,
        repository_repo: "RepositoryRepository",
        tag_repo: "TagRepository",
        tag_fetcher: "GitTagFetcher",
        host_adapter_factory: "HostAdapterFactory",
    ):
        self.repository_repo = repository_repo
        self.tag_repo = tag_repo
        self.tag_fetcher = tag_fetcher
        self.host_adapter_factory = host_adapter_factory

    async def download_tags(self, repository_id: UUID) -> bool:
        """Sync the repository's tags with its remote.

        ``tags_last_synced_at`` is stamped whether or not the remote could be
        reached, so an unreachable repository moves to the back of the queue.
        """
        repository = await self.repository_repo.get(repository_id)
        synced = False

        try:
            clone_url = self.host_adapter_factory(repository.host).clone_url(repository)
            remote_tags = await self.tag_fetcher.fetch(clone_url)
        except HostError as exc:
            logger.warning(
                "Failed to download tags",
                extra={"repository": repository.full_name, "error": str(exc)},
            )
        else:
            created, updated, deleted = await self.tag_repo.converge(
                repository.id, remote_tags
            )
            synced = True
            logger.info(
                "Synced tags",
                extra={
                    "repository": repository.full_name,
                    "created_tags": created,
                    "updated_tags": updated,
                    "deleted_tags": deleted,
                },
            )

        await self.repository_repo.stamp_tags_synced(
            repository.id, datetime.now(timezone.utc)
        )
        return synced
