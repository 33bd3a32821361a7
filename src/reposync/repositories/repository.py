from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from reposync.base.base_entity import Entity
from reposync.hosts.host import Host
from reposync.main.exceptions import InvalidParseStateTransition

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from reposync.database.tables.repositories_table import (
        Repositories as RepositoriesTable,
    )


class ParseState(str, Enum):
    """Where a repository is in its dependency parsing cycle.

    Persisted implicitly through ``dependency_job_id`` and
    ``dependencies_parsed_at``; ``RECONCILING`` only exists while a terminal
    job result is being applied.
    """

    NEVER_ATTEMPTED = "never_attempted"
    SUBMITTED = "submitted"
    RECONCILING = "reconciling"
    DONE = "done"


class Repository(Entity):
    def __init__(
        self,
        id: Optional["UUID"],
        created_at: Optional["datetime"],
        updated_at: Optional["datetime"],
        host: Host,
        full_name: str,
        uuid: Optional[str] = None,
        owner: Optional[str] = None,
        default_branch: Optional[str] = None,
        fork: bool = False,
        archived: bool = False,
        status: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        dependencies_parsed_at: Optional["datetime"] = None,
        dependency_job_id: Optional[str] = None,
        dependency_job_submitted_at: Optional["datetime"] = None,
        tags_last_synced_at: Optional["datetime"] = None,
        usage_updated_at: Optional["datetime"] = None,
    ):
        super().__init__(id=id, created_at=created_at, updated_at=updated_at)
        self.host = host
        self.full_name = full_name
        self.uuid = uuid
        self._owner = owner
        self.default_branch = default_branch
        self.fork = fork
        self.archived = archived
        self.status = status
        self.metadata = metadata if metadata is not None else {}
        self.dependencies_parsed_at = dependencies_parsed_at
        self.dependency_job_id = dependency_job_id
        self.dependency_job_submitted_at = dependency_job_submitted_at
        self.tags_last_synced_at = tags_last_synced_at
        self.usage_updated_at = usage_updated_at
        self._reconciling = False

    def __str__(self) -> str:
        return self.full_name

    @property
    def owner(self) -> str:
        return self._owner or self.full_name.split("/")[0]

    @property
    def project_slug(self) -> str:
        return self.full_name.split("/")[-1]

    @property
    def project_name(self) -> str:
        return "/".join(self.full_name.split("/")[1:])

    @property
    def subgroups(self) -> list[str]:
        parts = self.full_name.split("/")
        if len(parts) < 3:
            return []
        return parts[1:-1]

    @property
    def is_active(self) -> bool:
        return self.status is None

    @property
    def parse_state(self) -> ParseState:
        if self._reconciling:
            return ParseState.RECONCILING
        if self.dependency_job_id is not None:
            return ParseState.SUBMITTED
        if self.dependencies_parsed_at is not None:
            return ParseState.DONE
        return ParseState.NEVER_ATTEMPTED

    def mark_submitted(self, job_id: str, at: "datetime") -> "Repository":
        """Record the handle of the outstanding parse job.

        Re-recording a different handle while submitted is allowed: the
        parsing service may hand out a new id for the same submission.
        """
        if self.parse_state == ParseState.RECONCILING:
            raise InvalidParseStateTransition(
                f"Cannot record job {job_id} for {self.full_name} while reconciling"
            )
        if not job_id:
            raise InvalidParseStateTransition("A job handle cannot be empty")

        if job_id != self.dependency_job_id:
            self.dependency_job_id = job_id
            self.dependency_job_submitted_at = at
        return self

    def begin_reconciling(self) -> "Repository":
        if self.parse_state == ParseState.RECONCILING:
            raise InvalidParseStateTransition(
                f"{self.full_name} is already reconciling"
            )
        self._reconciling = True
        return self

    def finish_parsing(self, at: "datetime") -> "Repository":
        if self.parse_state != ParseState.RECONCILING:
            raise InvalidParseStateTransition(
                f"{self.full_name} cannot finish parsing from {self.parse_state.value}"
            )
        self._reconciling = False
        self.dependency_job_id = None
        self.dependency_job_submitted_at = None
        self.dependencies_parsed_at = at
        return self

    def abandon_job(self) -> "Repository":
        if self.parse_state != ParseState.SUBMITTED:
            raise InvalidParseStateTransition(
                f"{self.full_name} has no outstanding job to abandon"
            )
        self.dependency_job_id = None
        self.dependency_job_submitted_at = None
        return self

    @classmethod
    def to_domain(cls, record: "RepositoriesTable") -> "Repository":
        return cls(
            id=record.id,
            created_at=record.created_at,
            updated_at=record.updated_at,
            host=Host.to_domain(record.host),
            full_name=record.full_name,
            uuid=record.uuid,
            owner=record.owner,
            default_branch=record.default_branch,
            fork=record.fork,
            archived=record.archived,
            status=record.status,
            metadata=dict(record.metadata_ or {}),
            dependencies_parsed_at=record.dependencies_parsed_at,
            dependency_job_id=record.dependency_job_id,
            dependency_job_submitted_at=record.dependency_job_submitted_at,
            tags_last_synced_at=record.tags_last_synced_at,
            usage_updated_at=record.usage_updated_at,
        )
