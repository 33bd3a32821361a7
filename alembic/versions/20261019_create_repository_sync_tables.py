# flake8: noqa

"""create repository sync tables

Revision ID: create_repository_sync
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

from alembic import op

# revision identifiers, used by Alembic
revision = 'create_repository_sync'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create hosts, repositories and the tables derived from them."""
    op.create_table(
        'hosts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('kind', sa.String(32), nullable=False),
    )

    op.create_table(
        'repositories',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('host_id', UUID(as_uuid=True), sa.ForeignKey('hosts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('uuid', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('owner', sa.String(), nullable=True),
        sa.Column('default_branch', sa.String(), nullable=True),
        sa.Column('fork', sa.Boolean(), server_default='False', nullable=False),
        sa.Column('archived', sa.Boolean(), server_default='False', nullable=False),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('metadata', JSONB(astext_type=sa.Text()), server_default='{}', nullable=False),
        sa.Column('dependencies_parsed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('dependency_job_id', sa.String(), nullable=True),
        sa.Column('dependency_job_submitted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('tags_last_synced_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('usage_updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
    )
    op.create_index('ix_repositories_host_id_full_name', 'repositories', ['host_id', 'full_name'], unique=True)
    op.create_index('ix_repositories_dependency_job_id', 'repositories', ['dependency_job_id'])
    op.create_index('ix_repositories_tags_last_synced_at', 'repositories', ['tags_last_synced_at'])
    op.create_index('ix_repositories_usage_updated_at', 'repositories', ['usage_updated_at'])

    op.create_table(
        'manifests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('repository_id', UUID(as_uuid=True), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ecosystem', sa.String(), nullable=True),
        sa.Column('kind', sa.String(), nullable=True),
        sa.Column('filepath', sa.String(), nullable=True),
        sa.Column('sha', sa.String(), nullable=True),
    )
    op.create_index('ix_manifests_repository_id', 'manifests', ['repository_id'])
    op.create_index('ix_manifests_identity', 'manifests', ['repository_id', 'ecosystem', 'kind', 'filepath', 'sha'])

    op.create_table(
        'dependencies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('manifest_id', UUID(as_uuid=True), sa.ForeignKey('manifests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('repository_id', UUID(as_uuid=True), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('package_name', sa.String(), nullable=True),
        sa.Column('ecosystem', sa.String(), nullable=True),
        sa.Column('requirements', sa.String(), nullable=True),
        sa.Column('kind', sa.String(), nullable=True),
        sa.Column('direct', sa.Boolean(), server_default='False', nullable=False),
    )
    op.create_index('ix_dependencies_manifest_id', 'dependencies', ['manifest_id'])
    op.create_index('ix_dependencies_repository_id', 'dependencies', ['repository_id'])
    op.create_index('ix_dependencies_package_name', 'dependencies', ['package_name'])

    op.create_table(
        'tags',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('repository_id', UUID(as_uuid=True), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sha', sa.String(), nullable=False),
        sa.UniqueConstraint('repository_id', 'name', name='uq_tags_repository_name'),
    )
    op.create_index('ix_tags_repository_id', 'tags', ['repository_id'])

    op.create_table(
        'package_usages',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        *_timestamps(),
        sa.Column('repository_id', UUID(as_uuid=True), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ecosystem', sa.String(), nullable=True),
        sa.Column('package_name', sa.String(), nullable=False),
        sa.Column('requirements', JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('direct', sa.Boolean(), server_default='False', nullable=False),
        sa.UniqueConstraint('repository_id', 'ecosystem', 'package_name', name='uq_package_usages_repository_package'),
    )
    op.create_index('ix_package_usages_repository_id', 'package_usages', ['repository_id'])
    op.create_index('ix_package_usages_package', 'package_usages', ['ecosystem', 'package_name'])


def downgrade() -> None:
    op.drop_table('package_usages')
    op.drop_table('tags')
    op.drop_table('dependencies')
    op.drop_table('manifests')
    op.drop_table('repositories')
    op.drop_table('hosts')
