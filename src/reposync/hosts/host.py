from enum import Enum
from typing import TYPE_CHECKING, Optional

from reposync.base.base_entity import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from reposync.database.tables.hosts_table import Hosts as HostsTable


class HostKind(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"
    BITBUCKET = "bitbucket"


class Host(Entity):
    def __init__(
        self,
        id: Optional["UUID"],
        created_at: Optional["datetime"],
        updated_at: Optional["datetime"],
        name: str,
        url: str,
        kind: HostKind,
    ):
        super().__init__(id=id, created_at=created_at, updated_at=updated_at)
        self.name = name
        self.url = url.rstrip("/")
        self.kind = kind

    @classmethod
    def to_domain(cls, record: "HostsTable") -> "Host":
        return cls(
            id=record.id,
            created_at=record.created_at,
            updated_at=record.updated_at,
            name=record.name,
            url=record.url,
            kind=HostKind(record.kind),
        )
