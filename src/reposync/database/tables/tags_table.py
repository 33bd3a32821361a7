from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reposync.database.tables.base_class import BasePublic
from reposync.database.tables.repositories_table import Repositories


class Tags(BasePublic):
    __table_args__ = (
        sa.UniqueConstraint("repository_id", "name", name="uq_tags_repository_name"),
    )

    repository_id: Mapped[UUID] = mapped_column(
        ForeignKey(Repositories.id, ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column()
    sha: Mapped[str] = mapped_column()
