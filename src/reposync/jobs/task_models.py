from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class Task(str, Enum):
    """Names of the worker functions that process one repository."""

    PARSE_DEPENDENCIES = "parse_dependencies"
    DOWNLOAD_TAGS = "download_tags"
    UPDATE_PACKAGE_USAGE = "update_package_usage"
    UPDATE_METADATA_FILES = "update_metadata_files"


class RepositoryTaskParams(BaseModel):
    repository_id: UUID
