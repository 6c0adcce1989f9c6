"""
Role graph store: queries over provider roles and their edge sets.

Keeps the retired filtering of provider roles in one place so every service
applies it the same way.
"""

from typing import List, Optional
from sqlalchemy.orm import Session, Query

from provider_management.models import (
    ProviderRole,
    RelationshipType,
    provider_role_relationship_types,
    provider_role_supervisee_roles,
)


def filter_active_roles(query: Query[ProviderRole]) -> Query[ProviderRole]:
    """
    Apply retired filter to provider role queries.

    Args:
        query: Base query for ProviderRole

    Returns:
        Query filtered to exclude retired roles
    """
    return query.filter(ProviderRole.retired == False)


def get_all_provider_roles(db: Session, include_retired: bool = False) -> List[ProviderRole]:
    """
    Get all provider roles ordered by name.

    Args:
        db: Database session
        include_retired: If True, include retired roles

    Returns:
        List of ProviderRole objects
    """
    query = db.query(ProviderRole)
    if not include_retired:
        query = filter_active_roles(query)
    return query.order_by(ProviderRole.name).all()


def get_provider_role(db: Session, role_id: int) -> Optional[ProviderRole]:
    return db.get(ProviderRole, role_id)


def get_provider_role_by_uuid(db: Session, uuid: str) -> Optional[ProviderRole]:
    return db.query(ProviderRole).filter(ProviderRole.uuid == uuid).first()


def get_provider_role_by_name(db: Session, name: str) -> Optional[ProviderRole]:
    return db.query(ProviderRole).filter(ProviderRole.name == name).first()


def get_provider_roles_by_relationship_type(
    db: Session,
    relationship_type: RelationshipType,
    include_retired: bool = False
) -> List[ProviderRole]:
    """
    Get the roles that support a relationship type.

    Args:
        db: Database session
        relationship_type: Relationship type to look for
        include_retired: If True, include retired roles

    Returns:
        List of ProviderRole objects
    """
    query = db.query(ProviderRole).join(
        provider_role_relationship_types,
        provider_role_relationship_types.c.provider_role_id == ProviderRole.id
    ).filter(
        provider_role_relationship_types.c.relationship_type_id == relationship_type.id
    )
    if not include_retired:
        query = filter_active_roles(query)
    return query.order_by(ProviderRole.name).all()


def get_provider_roles_by_supervisee_role(
    db: Session,
    supervisee_role: ProviderRole,
    include_retired: bool = False
) -> List[ProviderRole]:
    """
    Get the roles that list a role among their supervisee roles.

    Args:
        db: Database session
        supervisee_role: Role being supervised
        include_retired: If True, include retired supervising roles (needed to
            clean up every edge before purging a role)

    Returns:
        List of ProviderRole objects with a direct edge to supervisee_role
    """
    query = db.query(ProviderRole).join(
        provider_role_supervisee_roles,
        provider_role_supervisee_roles.c.provider_role_id == ProviderRole.id
    ).filter(
        provider_role_supervisee_roles.c.supervisee_provider_role_id == supervisee_role.id
    )
    if not include_retired:
        query = filter_active_roles(query)
    return query.order_by(ProviderRole.name).all()
