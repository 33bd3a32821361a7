from uuid import UUID

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from reposync.database.tables.base_class import BasePublic
from reposync.database.tables.manifests_table import Manifests
from reposync.database.tables.repositories_table import Repositories


class Dependencies(BasePublic):
    manifest_id: Mapped[UUID] = mapped_column(
        ForeignKey(Manifests.id, ondelete="CASCADE"), index=True
    )
    # Denormalized so per-repository queries skip the manifests join
    repository_id: Mapped[UUID] = mapped_column(
        ForeignKey(Repositories.id, ondelete="CASCADE"), index=True
    )
    package_name: Mapped[str | None] = mapped_column(index=True)
    ecosystem: Mapped[str | None] = mapped_column()
    requirements: Mapped[str | None] = mapped_column()
    kind: Mapped[str | None] = mapped_column()
    direct: Mapped[bool] = mapped_column(default=False)
