"""
Role compatibility service.

Answers which roles a person holds, which relationship types those roles
support and which roles they may supervise. All methods are side-effect free
reads; the assignment services call them before every write.
"""

import logging
from typing import Iterable, List, Set

from sqlalchemy.orm import Session

from provider_management.core.exceptions import require
from provider_management.models import Person, ProviderRole, Relationship, RelationshipType
from provider_management.utils import provider_queries, role_queries

logger = logging.getLogger(__name__)


class RoleCompatibilityService:
    """
    Service class for role graph and compatibility queries.
    """

    @staticmethod
    def get_provider_roles(db: Session, person: Person) -> Set[ProviderRole]:
        """
        Get the roles a person holds through non-retired Provider records.

        Args:
            db: Database session
            person: Person to inspect

        Returns:
            Set of ProviderRole objects (empty if the person is not a provider)

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If person is None
        """
        require(person, "Provider")

        providers = provider_queries.get_providers_by_person(db, person)
        return {p.provider_role for p in providers if p.provider_role is not None}

    @staticmethod
    def is_provider(db: Session, person: Person) -> bool:
        """
        Check if a person has at least one Provider record, retired or not.

        Args:
            db: Database session
            person: Person to inspect

        Returns:
            True if the person is a provider
        """
        require(person, "Person")

        return len(provider_queries.get_providers_by_person(db, person, include_retired=True)) > 0

    @staticmethod
    def has_role(db: Session, person: Person, role: ProviderRole) -> bool:
        """Check if a person currently holds a role."""
        require(person, "Provider")
        require(role, "Role")

        return any(r.id == role.id for r in RoleCompatibilityService.get_provider_roles(db, person))

    @staticmethod
    def supports_relationship_type(db: Session, person: Person, relationship_type: RelationshipType) -> bool:
        """
        Check if any of a person's roles supports a relationship type.

        Args:
            db: Database session
            person: Person (provider) to inspect
            relationship_type: Relationship type to check

        Returns:
            True if at least one role of the person declares the type
        """
        require(person, "Provider")
        require(relationship_type, "Relationship type")

        return any(
            role.supports_relationship_type(relationship_type)
            for role in RoleCompatibilityService.get_provider_roles(db, person)
        )

    @staticmethod
    def get_provider_roles_that_provider_can_supervise(db: Session, person: Person) -> Set[ProviderRole]:
        """
        Get the roles a person may supervise.

        Union of the direct supervisee roles of each role the person holds.
        Edges are not followed transitively: if A supervises B and B
        supervises C, a holder of A may not supervise C unless A lists C.

        Args:
            db: Database session
            person: Person (provider) to inspect

        Returns:
            Set of ProviderRole objects
        """
        require(person, "Provider")

        supervisable: Set[ProviderRole] = set()
        for role in RoleCompatibilityService.get_provider_roles(db, person):
            supervisable.update(role.supervisee_roles)
        return supervisable

    @staticmethod
    def can_supervise(db: Session, supervisor: Person, supervisee: Person) -> bool:
        """
        Check if one person may supervise another.

        A person never supervises themselves. Otherwise the supervisor must be
        able to supervise at least one role the supervisee holds.

        Args:
            db: Database session
            supervisor: Prospective supervisor
            supervisee: Prospective supervisee

        Returns:
            True if supervision is allowed
        """
        require(supervisor, "Supervisor")
        require(supervisee, "Provider")

        if supervisor.id == supervisee.id:
            return False

        supervisable_ids = {
            r.id for r in RoleCompatibilityService.get_provider_roles_that_provider_can_supervise(db, supervisor)
        }
        return any(r.id in supervisable_ids for r in RoleCompatibilityService.get_provider_roles(db, supervisee))

    @staticmethod
    def get_all_provider_relationship_types(db: Session, include_retired: bool = False) -> Set[RelationshipType]:
        """
        Get every relationship type supported by some provider role.

        Args:
            db: Database session
            include_retired: If False, skip retired roles and retired relationship types

        Returns:
            Set of RelationshipType objects
        """
        relationship_types: Set[RelationshipType] = set()
        for role in role_queries.get_all_provider_roles(db, include_retired=include_retired):
            if include_retired:
                relationship_types.update(role.relationship_types)
            else:
                relationship_types.update(rt for rt in role.relationship_types if not rt.retired)
        return relationship_types

    @staticmethod
    def is_provider_relationship_type(db: Session, relationship_type: RelationshipType) -> bool:
        """Check if a relationship type is managed by some non-retired role."""
        require(relationship_type, "Relationship type")

        return any(
            rt.id == relationship_type.id
            for rt in RoleCompatibilityService.get_all_provider_relationship_types(db)
        )

    @staticmethod
    def filter_provider_relationships(db: Session, relationships: Iterable[Relationship]) -> List[Relationship]:
        """
        Keep only relationships whose type is a provider relationship type.

        Args:
            db: Database session
            relationships: Relationships to filter

        Returns:
            Filtered list, original order preserved
        """
        provider_type_ids = {
            rt.id for rt in RoleCompatibilityService.get_all_provider_relationship_types(db)
        }
        return [r for r in relationships if r.relationship_type_id in provider_type_ids]
