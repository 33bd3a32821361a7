from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reposync.database.tables.base_class import BasePublic, JSONType
from reposync.database.tables.repositories_table import Repositories


class PackageUsages(BasePublic):
    __tablename__ = "package_usages"
    __table_args__ = (
        sa.UniqueConstraint(
            "repository_id",
            "ecosystem",
            "package_name",
            name="uq_package_usages_repository_package",
        ),
        sa.Index("ix_package_usages_package", "ecosystem", "package_name"),
    )

    repository_id: Mapped[UUID] = mapped_column(
        ForeignKey(Repositories.id, ondelete="CASCADE"), index=True
    )
    ecosystem: Mapped[str | None] = mapped_column()
    package_name: Mapped[str] = mapped_column()
    requirements: Mapped[list[str]] = mapped_column(JSONType, default=list)
    direct: Mapped[bool] = mapped_column(default=False)
