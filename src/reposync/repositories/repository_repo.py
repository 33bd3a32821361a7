from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

import sqlalchemy as sa

from reposync.database.tables.repositories_table import Repositories
from reposync.main.exceptions import NotFoundException
from reposync.repositories.repository import Repository

if TYPE_CHECKING:
    from reposync.database.database import AsyncSession


class RepositoryRepository:
    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def get(self, id: UUID, for_update: bool = False) -> Repository:
        """Load a repository.

        ``for_update`` locks the row (PostgreSQL) so that two reconciliations of
        the same repository run one after the other.
        """
        stmt = sa.select(Repositories).where(Repositories.id == id)
        if for_update:
            stmt = stmt.with_for_update(of=Repositories)

        record = await self.session.scalar(stmt)
        if record is None:
            raise NotFoundException(f"Repository {id} not found")

        return Repository.to_domain(record)

    async def find_by_full_name(
        self, host_id: UUID, full_name: str
    ) -> Optional[Repository]:
        stmt = sa.select(Repositories).where(
            Repositories.host_id == host_id,
            sa.func.lower(Repositories.full_name) == full_name.lower(),
        )
        record = await self.session.scalar(stmt)
        return Repository.to_domain(record) if record is not None else None

    # Candidate selection

    def _eligible(self) -> sa.Select:
        return sa.select(Repositories.id).where(
            Repositories.status.is_(None),
            Repositories.fork.is_(False),
        )

    async def _ids(self, stmt: sa.Select) -> list[UUID]:
        return list(await self.session.scalars(stmt))

    async def get_unparsed_ids(self, limit: int) -> list[UUID]:
        stmt = (
            self._eligible()
            .where(
                Repositories.dependencies_parsed_at.is_(None),
                Repositories.dependency_job_id.is_(None),
            )
            .order_by(Repositories.created_at, Repositories.id)
            .limit(limit)
        )
        return await self._ids(stmt)

    async def get_pending_job_ids(self, limit: int) -> list[UUID]:
        stmt = (
            sa.select(Repositories.id)
            .where(Repositories.dependency_job_id.is_not(None))
            .order_by(Repositories.dependency_job_submitted_at.asc().nulls_first())
            .limit(limit)
        )
        return await self._ids(stmt)

    async def get_ids_by_tags_synced(self, limit: int) -> list[UUID]:
        stmt = (
            self._eligible()
            .order_by(Repositories.tags_last_synced_at.asc().nulls_first(), Repositories.id)
            .limit(limit)
        )
        return await self._ids(stmt)

    async def get_ids_by_usage_updated(self, limit: int) -> list[UUID]:
        stmt = (
            self._eligible()
            .order_by(Repositories.usage_updated_at.asc().nulls_first(), Repositories.id)
            .limit(limit)
        )
        return await self._ids(stmt)

    async def get_ids_without_metadata(self, limit: int) -> list[UUID]:
        # An empty JSON object serializes to "{}"
        stmt = (
            self._eligible()
            .where(sa.func.length(sa.cast(Repositories.metadata_, sa.Text)) == 2)
            .order_by(Repositories.created_at, Repositories.id)
            .limit(limit)
        )
        return await self._ids(stmt)

    # State updates

    async def record_job_handle(
        self, id: UUID, job_id: str, submitted_at: datetime
    ) -> None:
        stmt = (
            sa.update(Repositories)
            .where(Repositories.id == id)
            .values(dependency_job_id=job_id, dependency_job_submitted_at=submitted_at)
        )
        await self.session.execute(stmt)

    async def record_parse_finished(self, id: UUID, parsed_at: datetime) -> None:
        stmt = (
            sa.update(Repositories)
            .where(Repositories.id == id)
            .values(
                dependencies_parsed_at=parsed_at,
                dependency_job_id=None,
                dependency_job_submitted_at=None,
            )
        )
        await self.session.execute(stmt)

    async def clear_job_handles_older_than(self, cutoff: datetime) -> int:
        """Abandon outstanding parse jobs submitted before ``cutoff``.

        Handles without a submission time predate its tracking and are
        treated as abandoned too.
        """
        stmt = (
            sa.update(Repositories)
            .where(Repositories.dependency_job_id.is_not(None))
            .where(
                sa.or_(
                    Repositories.dependency_job_submitted_at.is_(None),
                    Repositories.dependency_job_submitted_at < cutoff,
                )
            )
            .values(dependency_job_id=None, dependency_job_submitted_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def stamp_tags_synced(self, id: UUID, at: datetime) -> None:
        await self.session.execute(
            sa.update(Repositories)
            .where(Repositories.id == id)
            .values(tags_last_synced_at=at)
        )

    async def stamp_usage_updated(self, id: UUID, at: datetime) -> None:
        await self.session.execute(
            sa.update(Repositories)
            .where(Repositories.id == id)
            .values(usage_updated_at=at)
        )

    async def update_metadata(self, id: UUID, metadata: dict[str, Any]) -> None:
        await self.session.execute(
            sa.update(Repositories)
            .where(Repositories.id == id)
            .values({Repositories.metadata_: metadata})
        )
