"""
Provider store: queries and writes for Provider records.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from provider_management.models import Person, Provider, ProviderRole
from provider_management.utils.datetime_utils import local_now

logger = logging.getLogger(__name__)


def get_providers_by_person(db: Session, person: Person, include_retired: bool = False) -> List[Provider]:
    """
    Get the Provider records of a person.

    Args:
        db: Database session
        person: Person to look up
        include_retired: If True, include retired records

    Returns:
        List of Provider objects ordered by id
    """
    query = db.query(Provider).filter(Provider.person_id == person.id)
    if not include_retired:
        query = query.filter(Provider.retired == False)
    return query.order_by(Provider.id).all()


def get_providers_by_roles(
    db: Session,
    roles: Sequence[ProviderRole],
    include_retired: bool = False
) -> List[Provider]:
    """
    Get the Provider records holding any of the given roles.

    Args:
        db: Database session
        roles: Roles to match
        include_retired: If True, include retired records

    Returns:
        List of Provider objects ordered by id
    """
    role_ids = [role.id for role in roles]
    query = db.query(Provider).filter(Provider.provider_role_id.in_(role_ids))
    if not include_retired:
        query = query.filter(Provider.retired == False)
    return query.order_by(Provider.id).all()


def create_provider(db: Session, person: Person, role: ProviderRole, identifier: str) -> Provider:
    """Create a Provider record and flush it."""
    provider = Provider(
        person_id=person.id,
        identifier=identifier,
        provider_role_id=role.id,
    )
    db.add(provider)
    db.flush()
    return provider


def retire_provider(db: Session, provider: Provider, reason: Optional[str] = None) -> Provider:
    """Retire a Provider record."""
    provider.retired = True
    provider.retired_at = local_now()
    provider.retire_reason = reason
    db.flush()
    return provider


def purge_provider(db: Session, provider: Provider) -> None:
    """Delete a Provider record."""
    db.delete(provider)
    db.flush()
