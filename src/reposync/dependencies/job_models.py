"""Wire models for the dependency parsing service.

``GET /jobs/<id>`` answers with::

    {"id": "...", "status": "pending|complete|error",
     "results": {"manifests": [{"platform": "npm", "kind": "manifest",
                                "path": "package.json", "sha": "...",
                                "dependencies": [{"name": "...",
                                                  "requirement": "...",
                                                  "type": "runtime"}]}]}}
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from reposync.main.exceptions import MalformedJobPayload


class JobStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_STATUSES = (JobStatus.COMPLETE.value, JobStatus.ERROR.value)


class ParsedManifest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ecosystem: Optional[str] = None
    kind: Optional[str] = None
    path: Optional[str] = None
    sha: Optional[str] = None
    # Entries that are not objects are dropped when dependency rows are built
    dependencies: list[Any] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def resolve_ecosystem(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            values["ecosystem"] = values.get("platform") or values.get("ecosystem")
            if values.get("dependencies") is None:
                values["dependencies"] = []
        return values

    @property
    def pair(self) -> tuple[Optional[str], Optional[str]]:
        return (self.ecosystem, self.path)


class ParseResults(BaseModel):
    model_config = ConfigDict(extra="ignore")

    manifests: list[ParsedManifest] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def null_manifests_are_empty(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("manifests") is None:
            values = dict(values)
            values["manifests"] = []
        return values


class ParseJob(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    status: str
    results: Optional[ParseResults] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_id(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            if values.get("id") is not None:
                values["id"] = str(values["id"])
            # Results of failed jobs are never read
            if values.get("status") == JobStatus.ERROR.value:
                values.pop("results", None)
        return values

    @model_validator(mode="after")
    def complete_jobs_carry_results(self) -> "ParseJob":
        if self.status == JobStatus.COMPLETE.value and self.results is None:
            raise ValueError("complete job without results")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_error(self) -> bool:
        return self.status == JobStatus.ERROR.value

    @property
    def manifests(self) -> list[ParsedManifest]:
        if self.status != JobStatus.COMPLETE.value or self.results is None:
            return []
        return self.results.manifests

    @classmethod
    def from_payload(cls, payload: Any) -> "ParseJob":
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MalformedJobPayload(f"Unexpected job payload: {exc}") from exc
