"""
Assignment validation utilities.

Centralizes the precondition checks shared by the patient assignment and
supervision services so both raise the same error kinds with the same
context fields.
"""

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from provider_management.core.exceptions import ErrorKind, ProviderManagementError, invalid_argument
from provider_management.models import Person, Relationship, RelationshipType

logger = logging.getLogger(__name__)


def validate_not_voided(person: Person, label: str) -> None:
    """
    Reject voided persons.

    Raises:
        ProviderManagementError(INVALID_ARGUMENT): If the person is voided
    """
    if person.is_voided:
        raise invalid_argument(f"{label} cannot be voided", person_id=person.id)


def validate_is_provider(db: Session, person: Person) -> None:
    """
    Require that a person is a provider.

    Raises:
        ProviderManagementError(PERSON_IS_NOT_PROVIDER): If the person has no Provider record
    """
    # Import here to avoid circular import
    from provider_management.services.role_compatibility_service import RoleCompatibilityService
    if not RoleCompatibilityService.is_provider(db, person):
        raise ProviderManagementError(
            ErrorKind.PERSON_IS_NOT_PROVIDER,
            f"{person} is not a provider",
            person_id=person.id,
        )


def validate_provider_relationship_type(db: Session, relationship_type: RelationshipType) -> None:
    """
    Require that a relationship type is managed by some provider role.

    Raises:
        ProviderManagementError(INVALID_RELATIONSHIP_TYPE): If no non-retired role supports the type
    """
    from provider_management.services.role_compatibility_service import RoleCompatibilityService
    if not RoleCompatibilityService.is_provider_relationship_type(db, relationship_type):
        raise ProviderManagementError(
            ErrorKind.INVALID_RELATIONSHIP_TYPE,
            f"Invalid relationship type: {relationship_type} is not a provider/patient relationship type",
            relationship_type_id=relationship_type.id,
        )


def single_active_relationship(
    relationships: List[Relationship],
    not_found: ProviderManagementError,
    description: str
) -> Relationship:
    """
    Return the only relationship of a lookup that must match at most one row.

    Args:
        relationships: Active relationships matching (A, B, type) at a date
        not_found: Error to raise when the list is empty
        description: Human readable description used when duplicates are found

    Raises:
        ProviderManagementError: not_found when empty; INTERNAL_CONSISTENCY_VIOLATION when duplicated
    """
    if not relationships:
        raise not_found
    if len(relationships) > 1:
        logger.error(f"Duplicate active relationships found for {description}: {[r.id for r in relationships]}")
        raise ProviderManagementError(
            ErrorKind.INTERNAL_CONSISTENCY_VIOLATION,
            f"Duplicate {description}",
            relationship_ids=[r.id for r in relationships],
        )
    return relationships[0]


def verify_persons_are_providers(db: Session, persons: Iterable[Person], relationship_ids: List[int]) -> None:
    """
    Verify that the provider side of stored relationships really is a provider.

    A failure means stored data is corrupt, not that the caller made a mistake.

    Raises:
        ProviderManagementError(INTERNAL_CONSISTENCY_VIOLATION): If any person is not a provider
    """
    from provider_management.services.role_compatibility_service import RoleCompatibilityService
    for person in persons:
        if not RoleCompatibilityService.is_provider(db, person):
            logger.error(f"{person} is referenced as provider by relationships {relationship_ids} but is not a provider")
            raise ProviderManagementError(
                ErrorKind.INTERNAL_CONSISTENCY_VIOLATION,
                f"{person} is not a provider",
                person_id=person.id,
            )
