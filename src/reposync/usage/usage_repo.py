from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

import sqlalchemy as sa

from reposync.database.tables.dependencies_table import Dependencies
from reposync.database.tables.package_usages_table import PackageUsages

if TYPE_CHECKING:
    from reposync.database.database import AsyncSession


@dataclass
class PackageUsage:
    ecosystem: str | None
    package_name: str
    requirements: list[str] = field(default_factory=list)
    direct: bool = False


def summarize_usage(
    dependencies: list[tuple[str | None, str | None, str | None, bool]],
) -> list[PackageUsage]:
    """Collapse (ecosystem, package_name, requirements, direct) rows per package.

    Requirements keep first-seen order without duplicates; a package is direct
    if any manifest lists it directly.
    """
    usages: dict[tuple[str | None, str], PackageUsage] = {}

    for ecosystem, package_name, requirements, direct in dependencies:
        if not package_name:
            continue

        usage = usages.setdefault(
            (ecosystem, package_name),
            PackageUsage(ecosystem=ecosystem, package_name=package_name),
        )
        if requirements and requirements not in usage.requirements:
            usage.requirements.append(requirements)
        usage.direct = usage.direct or bool(direct)

    return list(usages.values())


class PackageUsageRepository:
    def __init__(self, session: "AsyncSession"):
        self.session = session

    async def get_dependency_rows(self, repository_id: UUID):
        stmt = (
            sa.select(
                Dependencies.ecosystem,
                Dependencies.package_name,
                Dependencies.requirements,
                Dependencies.direct,
            )
            .where(Dependencies.repository_id == repository_id)
            .order_by(Dependencies.created_at, Dependencies.id)
        )
        result = await self.session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def get_usages(self, repository_id: UUID) -> list[PackageUsage]:
        stmt = (
            sa.select(PackageUsages)
            .where(PackageUsages.repository_id == repository_id)
            .order_by(PackageUsages.ecosystem, PackageUsages.package_name)
        )
        records = await self.session.scalars(stmt)
        return [
            PackageUsage(
                ecosystem=record.ecosystem,
                package_name=record.package_name,
                requirements=list(record.requirements or []),
                direct=record.direct,
            )
            for record in records
        ]

    async def replace_usages(
        self, repository_id: UUID, usages: list[PackageUsage]
    ) -> None:
        await self.session.execute(
            sa.delete(PackageUsages).where(
                PackageUsages.repository_id == repository_id
            )
        )

        if usages:
            self.session.add_all(
                [
                    PackageUsages(
                        repository_id=repository_id,
                        ecosystem=usage.ecosystem,
                        package_name=usage.package_name,
                        requirements=usage.requirements,
                        direct=usage.direct,
                    )
                    for usage in usages
                ]
            )
            await self.session.flush()
