"""Planning how stored manifests converge to a parse job result.

Planning is pure: it takes what is stored and what the parsing service
returned, and decides which manifests to create and which to delete. The
plan is applied in one transaction by ``ManifestRepository.apply``.

Rules, in order:

1. An ``error`` job, or a ``complete`` job without manifests, deletes every
   stored manifest.
2. A manifest whose (ecosystem, kind, filepath, sha) is already stored is
   left alone. Unknown manifests without dependencies are skipped; the rest
   are created with their dependencies deduplicated by
   (name, requirement, type).
3. Stored manifests whose (ecosystem, filepath) no longer appears in the
   result are deleted. Afterwards only the latest manifest per
   (ecosystem, filepath) survives: freshly created rows win, otherwise the
   newest stored row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence
from uuid import UUID

if TYPE_CHECKING:
    from reposync.dependencies.job_models import ParsedManifest, ParseJob

DIRECT_MANIFEST_KIND = "manifest"

ManifestKey = tuple[Optional[str], Optional[str], Optional[str], Optional[str]]
ManifestPair = tuple[Optional[str], Optional[str]]


@dataclass(frozen=True)
class StoredManifest:
    id: UUID
    ecosystem: Optional[str]
    kind: Optional[str]
    filepath: Optional[str]
    sha: Optional[str]
    created_at: Optional[datetime] = None

    @property
    def key(self) -> ManifestKey:
        return (self.ecosystem, self.kind, self.filepath, self.sha)

    @property
    def pair(self) -> ManifestPair:
        return (self.ecosystem, self.filepath)


@dataclass(frozen=True)
class DependencyDraft:
    package_name: Optional[str]
    ecosystem: Optional[str]
    requirements: Optional[str]
    kind: Optional[str]
    direct: bool


@dataclass
class ManifestDraft:
    ecosystem: Optional[str]
    kind: Optional[str]
    filepath: Optional[str]
    sha: Optional[str]
    dependencies: list[DependencyDraft] = field(default_factory=list)

    @property
    def key(self) -> ManifestKey:
        return (self.ecosystem, self.kind, self.filepath, self.sha)

    @property
    def pair(self) -> ManifestPair:
        return (self.ecosystem, self.filepath)


@dataclass
class ReconciliationPlan:
    to_create: list[ManifestDraft] = field(default_factory=list)
    to_delete: list[UUID] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.to_create and not self.to_delete


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def build_dependency_drafts(
    ecosystem: Optional[str], kind: Optional[str], dependencies: Iterable[Any]
) -> list[DependencyDraft]:
    """Deduplicate raw dependency entries into rows for one manifest.

    Entries that are not objects are ignored and values are stored as text.
    The first occurrence of each (stripped name, requirement, type) is kept.
    """
    direct = kind == DIRECT_MANIFEST_KIND
    seen: set[tuple[Any, Any, Any]] = set()
    drafts: list[DependencyDraft] = []

    for dependency in dependencies:
        if not isinstance(dependency, dict):
            continue

        name = _text(dependency.get("name"))
        if name is not None:
            name = name.strip()
        requirement = _text(dependency.get("requirement"))
        dependency_type = _text(dependency.get("type"))

        identity = (name, requirement, dependency_type)
        if identity in seen:
            continue
        seen.add(identity)

        drafts.append(
            DependencyDraft(
                package_name=name,
                ecosystem=ecosystem,
                requirements=requirement,
                kind=dependency_type,
                direct=direct,
            )
        )

    return drafts


def _draft_from(manifest: "ParsedManifest") -> ManifestDraft:
    return ManifestDraft(
        ecosystem=manifest.ecosystem,
        kind=manifest.kind,
        filepath=manifest.path,
        sha=manifest.sha,
        dependencies=build_dependency_drafts(
            manifest.ecosystem, manifest.kind, manifest.dependencies
        ),
    )


def _recency(manifest: StoredManifest) -> tuple[datetime, str]:
    created_at = manifest.created_at or datetime.min
    if created_at.tzinfo is not None:
        created_at = created_at.replace(tzinfo=None) - (created_at.utcoffset())
    return (created_at, str(manifest.id))


def plan_reconciliation(
    existing: Sequence[StoredManifest], job: "ParseJob"
) -> ReconciliationPlan:
    if not job.is_terminal:
        raise ValueError(f"Cannot reconcile a job in status {job.status!r}")

    incoming = job.manifests
    if job.is_error or not incoming:
        return ReconciliationPlan(to_delete=[manifest.id for manifest in existing])

    plan = ReconciliationPlan()
    known_keys = {manifest.key for manifest in existing}

    for manifest in incoming:
        draft = _draft_from(manifest)
        if draft.key in known_keys:
            continue
        if not manifest.dependencies:
            continue
        plan.to_create.append(draft)
        known_keys.add(draft.key)

    incoming_pairs = {manifest.pair for manifest in incoming}
    deleted: set[UUID] = set()

    for manifest in existing:
        if manifest.pair not in incoming_pairs:
            deleted.add(manifest.id)

    # Only the latest manifest per (ecosystem, filepath) survives
    created_pairs = {draft.pair for draft in plan.to_create}
    survivors: dict[ManifestPair, StoredManifest] = {}
    for manifest in existing:
        if manifest.id in deleted:
            continue
        if manifest.pair in created_pairs:
            deleted.add(manifest.id)
            continue
        current = survivors.get(manifest.pair)
        if current is None or _recency(manifest) > _recency(current):
            survivors[manifest.pair] = manifest

    survivor_ids = {manifest.id for manifest in survivors.values()}
    for manifest in existing:
        if manifest.id not in survivor_ids:
            deleted.add(manifest.id)

    # Several new drafts for one pair: the last one listed wins
    latest_drafts: dict[ManifestPair, ManifestDraft] = {}
    for draft in plan.to_create:
        latest_drafts[draft.pair] = draft
    plan.to_create = [
        draft for draft in plan.to_create if latest_drafts[draft.pair] is draft
    ]

    plan.to_delete = [manifest.id for manifest in existing if manifest.id in deleted]
    return plan
