"""Importing this package registers every table on ``Base.metadata``."""

from reposync.database.tables.base_class import Base, BasePublic
from reposync.database.tables.dependencies_table import Dependencies
from reposync.database.tables.hosts_table import Hosts
from reposync.database.tables.manifests_table import Manifests
from reposync.database.tables.package_usages_table import PackageUsages
from reposync.database.tables.repositories_table import Repositories
from reposync.database.tables.tags_table import Tags

__all__ = [
    "Base",
    "BasePublic",
    "Dependencies",
    "Hosts",
    "Manifests",
    "PackageUsages",
    "Repositories",
    "Tags",
]
