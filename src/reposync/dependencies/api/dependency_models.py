from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from reposync.dependencies.dependency_parsing_service import ParseOutcome


class DependencyJobRecorded(BaseModel):
    repository_id: UUID
    outcome: ParseOutcome
    dependency_job_id: Optional[str] = None
