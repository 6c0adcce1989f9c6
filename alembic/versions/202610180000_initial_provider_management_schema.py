"""initial provider management schema

Revision ID: 202610180000
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates persons, patients, relationship types, provider roles with their
role graph association tables, providers and relationships.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '202610180000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'persons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=38), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('is_voided', sa.Boolean(), nullable=False),
        sa.Column('voided_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('void_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
    )
    op.create_index('ix_persons_id', 'persons', ['id'])

    op.create_table(
        'patients',
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('is_voided', sa.Boolean(), nullable=False),
        sa.Column('voided_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('person_id'),
    )

    op.create_table(
        'relationship_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=38), nullable=False),
        sa.Column('a_is_to_b', sa.String(length=255), nullable=False),
        sa.Column('b_is_to_a', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('retired', sa.Boolean(), nullable=False),
        sa.Column('retired_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
    )
    op.create_index('ix_relationship_types_id', 'relationship_types', ['id'])

    op.create_table(
        'provider_roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=38), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('retired', sa.Boolean(), nullable=False),
        sa.Column('retired_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('retire_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_provider_roles_id', 'provider_roles', ['id'])

    op.create_table(
        'provider_role_relationship_types',
        sa.Column('provider_role_id', sa.Integer(), nullable=False),
        sa.Column('relationship_type_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['provider_role_id'], ['provider_roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['relationship_type_id'], ['relationship_types.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('provider_role_id', 'relationship_type_id'),
    )

    # No cascade on the supervisee side: edges must be detached before a role is purged
    op.create_table(
        'provider_role_supervisee_roles',
        sa.Column('provider_role_id', sa.Integer(), nullable=False),
        sa.Column('supervisee_provider_role_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['provider_role_id'], ['provider_roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['supervisee_provider_role_id'], ['provider_roles.id']),
        sa.PrimaryKeyConstraint('provider_role_id', 'supervisee_provider_role_id'),
    )
    op.create_index(
        'idx_provider_role_supervisee_roles_supervisee',
        'provider_role_supervisee_roles',
        ['supervisee_provider_role_id']
    )

    op.create_table(
        'providers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('identifier', sa.String(length=50), nullable=False),
        sa.Column('provider_role_id', sa.Integer(), nullable=False),
        sa.Column('retired', sa.Boolean(), nullable=False),
        sa.Column('retired_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('retire_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['provider_role_id'], ['provider_roles.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_providers_id', 'providers', ['id'])
    op.create_index('idx_providers_person', 'providers', ['person_id', 'retired'])
    op.create_index('idx_providers_role', 'providers', ['provider_role_id'])

    op.create_table(
        'relationships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('person_a_id', sa.Integer(), nullable=False),
        sa.Column('person_b_id', sa.Integer(), nullable=False),
        sa.Column('relationship_type_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['person_a_id'], ['persons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_b_id'], ['persons.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['relationship_type_id'], ['relationship_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_relationships_id', 'relationships', ['id'])
    op.create_index('idx_relationships_person_a_type', 'relationships', ['person_a_id', 'relationship_type_id'])
    op.create_index('idx_relationships_person_b_type', 'relationships', ['person_b_id', 'relationship_type_id'])

    # At most one open-ended relationship per (A, B, type)
    op.create_index(
        'uq_relationships_open_ended',
        'relationships',
        ['person_a_id', 'person_b_id', 'relationship_type_id'],
        unique=True,
        postgresql_where=sa.text('end_date IS NULL'),
        sqlite_where=sa.text('end_date IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uq_relationships_open_ended', table_name='relationships')
    op.drop_index('idx_relationships_person_b_type', table_name='relationships')
    op.drop_index('idx_relationships_person_a_type', table_name='relationships')
    op.drop_index('ix_relationships_id', table_name='relationships')
    op.drop_table('relationships')

    op.drop_index('idx_providers_role', table_name='providers')
    op.drop_index('idx_providers_person', table_name='providers')
    op.drop_index('ix_providers_id', table_name='providers')
    op.drop_table('providers')

    op.drop_index('idx_provider_role_supervisee_roles_supervisee', table_name='provider_role_supervisee_roles')
    op.drop_table('provider_role_supervisee_roles')
    op.drop_table('provider_role_relationship_types')

    op.drop_index('ix_provider_roles_id', table_name='provider_roles')
    op.drop_table('provider_roles')

    op.drop_index('ix_relationship_types_id', table_name='relationship_types')
    op.drop_table('relationship_types')

    op.drop_table('patients')

    op.drop_index('ix_persons_id', table_name='persons')
    op.drop_table('persons')
