from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reposync.database.tables.base_class import BasePublic
from reposync.database.tables.repositories_table import Repositories


class Manifests(BasePublic):
    __table_args__ = (
        sa.Index(
            "ix_manifests_identity",
            "repository_id",
            "ecosystem",
            "kind",
            "filepath",
            "sha",
        ),
    )

    repository_id: Mapped[UUID] = mapped_column(
        ForeignKey(Repositories.id, ondelete="CASCADE"), index=True
    )
    ecosystem: Mapped[str | None] = mapped_column()
    kind: Mapped[str | None] = mapped_column()
    filepath: Mapped[str | None] = mapped_column()
    sha: Mapped[str | None] = mapped_column()
