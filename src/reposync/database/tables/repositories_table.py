from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reposync.database.tables.base_class import BasePublic, JSONType
from reposync.database.tables.hosts_table import Hosts


class Repositories(BasePublic):
    __table_args__ = (
        sa.Index("ix_repositories_host_id_full_name", "host_id", "full_name", unique=True),
        sa.Index("ix_repositories_dependency_job_id", "dependency_job_id"),
        sa.Index("ix_repositories_tags_last_synced_at", "tags_last_synced_at"),
        sa.Index("ix_repositories_usage_updated_at", "usage_updated_at"),
    )

    host_id: Mapped[UUID] = mapped_column(ForeignKey(Hosts.id, ondelete="CASCADE"))
    uuid: Mapped[Optional[str]] = mapped_column()
    full_name: Mapped[str] = mapped_column()
    owner: Mapped[Optional[str]] = mapped_column()
    default_branch: Mapped[Optional[str]] = mapped_column()
    fork: Mapped[bool] = mapped_column(default=False)
    archived: Mapped[bool] = mapped_column(default=False)
    status: Mapped[Optional[str]] = mapped_column()

    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict, server_default="{}"
    )

    dependencies_parsed_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    dependency_job_id: Mapped[Optional[str]] = mapped_column()
    dependency_job_submitted_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    tags_last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )
    usage_updated_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True)
    )

    host: Mapped[Hosts] = relationship(lazy="joined")
