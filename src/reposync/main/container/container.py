from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession

from reposync.dependencies.dependency_parsing_service import DependencyParsingService
from reposync.dependencies.manifest_repo import ManifestRepository
from reposync.dispatch.admission import AdmissionController, ArqQueueMonitor
from reposync.dispatch.candidate_selector import CandidateSelector
from reposync.dispatch.categories import work_categories
from reposync.dispatch.dispatcher import Dispatcher
from reposync.hosts.host_adapters import HostAdapterFactory
from reposync.jobs.job_manager import job_manager
from reposync.libs.clients.archives_client import ArchivesClient
from reposync.libs.clients.parser_client import ParserClient
from reposync.main.config import get_settings
from reposync.metadata.metadata_service import MetadataService
from reposync.repositories.repository_repo import RepositoryRepository
from reposync.tags.git_tags import GitTagFetcher
from reposync.tags.tag_repo import TagRepository
from reposync.tags.tag_service import TagService
from reposync.usage.usage_repo import PackageUsageRepository
from reposync.usage.usage_service import PackageUsageService


class Container(containers.DeclarativeContainer):
    session = providers.Dependency(instance_of=AsyncSession)

    settings = providers.Callable(get_settings)
    job_manager = providers.Object(job_manager)
    work_categories = providers.Callable(work_categories, settings=settings)

    # Clients
    parser_client = providers.Factory(ParserClient)
    archives_client = providers.Factory(ArchivesClient)
    host_adapter_factory = providers.Factory(
        HostAdapterFactory, archives_client=archives_client
    )
    tag_fetcher = providers.Factory(
        GitTagFetcher,
        timeout=settings.provided.git_timeout_seconds,
    )

    # Repositories
    repository_repo = providers.Factory(RepositoryRepository, session=session)
    manifest_repo = providers.Factory(ManifestRepository, session=session)
    tag_repo = providers.Factory(TagRepository, session=session)
    package_usage_repo = providers.Factory(PackageUsageRepository, session=session)

    # Services
    dependency_parsing_service = providers.Factory(
        DependencyParsingService,
        repository_repo=repository_repo,
        manifest_repo=manifest_repo,
        parser_client=parser_client,
        host_adapter_factory=host_adapter_factory,
    )
    tag_service = providers.Factory(
        TagService,
        repository_repo=repository_repo,
        tag_repo=tag_repo,
        tag_fetcher=tag_fetcher,
        host_adapter_factory=host_adapter_factory,
    )
    package_usage_service = providers.Factory(
        PackageUsageService,
        repository_repo=repository_repo,
        usage_repo=package_usage_repo,
    )
    metadata_service = providers.Factory(
        MetadataService,
        repository_repo=repository_repo,
        host_adapter_factory=host_adapter_factory,
    )

    # Dispatch
    queue_monitor = providers.Factory(ArqQueueMonitor, job_manager=job_manager)
    admission_controller = providers.Factory(
        AdmissionController, monitor=queue_monitor
    )
    candidate_selector = providers.Factory(
        CandidateSelector, repository_repo=repository_repo
    )
    dispatcher = providers.Factory(
        Dispatcher,
        admission_controller=admission_controller,
        candidate_selector=candidate_selector,
        job_manager=job_manager,
    )
