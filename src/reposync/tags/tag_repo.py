from typing import TYPE_CHECKING
from uuid import UUID

import sqlalchemy as sa

from reposync.database.tables.tags_table import Tags
from reposync.tags.tag import RemoteTag

if TYPE_CHECKING:
    from reposync.database.database import AsyncSession


class TagRepository:
    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def get_tags(self, repository_id: UUID) -> dict[str, str]:
        stmt = sa.select(Tags.name, Tags.sha).where(
            Tags.repository_id == repository_id
        )
        result = await self.session.execute(stmt)
        return {name: sha for name, sha in result.all()}

    async def converge(
        self, repository_id: UUID, remote_tags: list[RemoteTag]
    ) -> tuple[int, int, int]:
        """Make the stored tags equal to ``remote_tags``.

        Returns:
            (created, updated, deleted) row counts.
        """
        existing = await self.get_tags(repository_id)
        remote = {tag.name: tag.sha for tag in remote_tags}

        to_create = [name for name in remote if name not in existing]
        to_update = [
            name for name in remote if name in existing and existing[name] != remote[name]
        ]
        to_delete = [name for name in existing if name not in remote]

        if to_delete:
            await self.session.execute(
                sa.delete(Tags).where(
                    Tags.repository_id == repository_id, Tags.name.in_(to_delete)
                )
            )

        for name in to_update:
            await self.session.execute(
                sa.update(Tags)
                .where(Tags.repository_id == repository_id, Tags.name == name)
                .values(sha=remote[name])
            )

        if to_create:
            self.session.add_all(
                [
                    Tags(repository_id=repository_id, name=name, sha=remote[name])
                    for name in to_create
                ]
            )
            await self.session.flush()

        return len(to_create), len(to_update), len(to_delete)
