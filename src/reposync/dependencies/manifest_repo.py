from typing import TYPE_CHECKING
from uuid import UUID

import sqlalchemy as sa

from reposync.database.tables.base_class import utcnow
from reposync.database.tables.dependencies_table import Dependencies
from reposync.database.tables.manifests_table import Manifests
from reposync.dependencies.reconciliation import ReconciliationPlan, StoredManifest
from reposync.main.logging import get_logger

if TYPE_CHECKING:
    from reposync.database.database import AsyncSession

logger = get_logger(__name__)


class ManifestRepository:
    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def get_manifests(self, repository_id: UUID) -> list[StoredManifest]:
        stmt = (
            sa.select(Manifests)
            .where(Manifests.repository_id == repository_id)
            .order_by(Manifests.created_at, Manifests.id)
        )
        manifests = await self.session.scalars(stmt)

        return [
            StoredManifest(
                id=manifest.id,
                ecosystem=manifest.ecosystem,
                kind=manifest.kind,
                filepath=manifest.filepath,
                sha=manifest.sha,
                created_at=manifest.created_at,
            )
            for manifest in manifests
        ]

    async def get_dependencies(self, repository_id: UUID) -> list[Dependencies]:
        stmt = (
            sa.select(Dependencies)
            .where(Dependencies.repository_id == repository_id)
            .order_by(Dependencies.created_at, Dependencies.id)
        )
        return list(await self.session.scalars(stmt))

    async def delete_manifests(self, manifest_ids: list[UUID]) -> None:
        if not manifest_ids:
            return

        # Dependencies go first so SQLite without FK enforcement stays consistent
        await self.session.execute(
            sa.delete(Dependencies)
            .where(Dependencies.manifest_id.in_(manifest_ids))
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            sa.delete(Manifests)
            .where(Manifests.id.in_(manifest_ids))
            .execution_options(synchronize_session=False)
        )

    async def apply(self, repository_id: UUID, plan: ReconciliationPlan) -> None:
        """Apply a reconciliation plan inside the caller's transaction."""
        if plan.is_noop:
            return

        await self.delete_manifests(plan.to_delete)

        now = utcnow()
        dependency_rows: list[dict] = []

        for draft in plan.to_create:
            manifest = Manifests(
                repository_id=repository_id,
                ecosystem=draft.ecosystem,
                kind=draft.kind,
                filepath=draft.filepath,
                sha=draft.sha,
                created_at=now,
                updated_at=now,
            )
            self.session.add(manifest)
            await self.session.flush([manifest])

            dependency_rows.extend(
                {
                    "manifest_id": manifest.id,
                    "repository_id": repository_id,
                    "package_name": dependency.package_name,
                    "ecosystem": dependency.ecosystem,
                    "requirements": dependency.requirements,
                    "kind": dependency.kind,
                    "direct": dependency.direct,
                    "created_at": now,
                    "updated_at": now,
                }
                for dependency in draft.dependencies
            )

        if dependency_rows:
            await self.session.execute(sa.insert(Dependencies), dependency_rows)

        logger.debug(
            "Applied manifest reconciliation",
            extra={
                "repository_id": str(repository_id),
                "created_manifests": len(plan.to_create),
                "deleted_manifests": len(plan.to_delete),
                "created_dependencies": len(dependency_rows),
            },
        )
