"""
Provider record service.

Gives persons provider roles and takes them away again. Also answers the
reverse lookups "who holds this role" and "who may take part in this
relationship type".
"""

import logging
from typing import List, Sequence

from sqlalchemy.orm import Session

from provider_management.core.exceptions import invalid_argument, require
from provider_management.models import Person, Provider, ProviderRole, RelationshipType
from provider_management.utils import provider_queries, role_queries
from provider_management.utils.assignment_validators import validate_not_voided

logger = logging.getLogger(__name__)


class ProviderService:
    """
    Service class for provider record operations.
    """

    @staticmethod
    def assign_provider_role_to_person(
        db: Session,
        person: Person,
        role: ProviderRole,
        identifier: str,
        commit: bool = True
    ) -> Provider:
        """
        Make a person a provider with the given role.

        Idempotent: if the person already holds the role through a non-retired
        Provider record, that record is returned and nothing is created.

        Args:
            db: Database session
            person: Person to give the role to
            role: Role to give
            identifier: Provider identifier for a new record
            commit: If False, leave committing to the caller

        Returns:
            The Provider record holding the role

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): On missing arguments, a
                voided person or a retired role
        """
        require(person, "Person")
        require(role, "Provider role")
        if not identifier or not identifier.strip():
            raise invalid_argument("Provider identifier cannot be empty", argument="identifier")

        validate_not_voided(person, "Person")
        if role.retired:
            raise invalid_argument(
                f"Cannot assign retired provider role {role.name}", role_id=role.id
            )

        for provider in provider_queries.get_providers_by_person(db, person):
            if provider.provider_role_id == role.id:
                logger.debug(f"Person {person.id} already holds provider role {role.id}")
                return provider

        provider = provider_queries.create_provider(db, person, role, identifier)
        if commit:
            db.commit()

        logger.info(f"Assigned provider role {role.id} ({role.name}) to person {person.id}")
        return provider

    @staticmethod
    def unassign_provider_role_from_person(
        db: Session,
        person: Person,
        role: ProviderRole,
        commit: bool = True
    ) -> int:
        """
        Retire every active Provider record of a person holding a role.

        Does nothing if the person does not hold the role.

        Returns:
            Number of records retired
        """
        require(person, "Person")
        require(role, "Provider role")

        retired = 0
        for provider in provider_queries.get_providers_by_person(db, person):
            if provider.provider_role_id == role.id:
                provider_queries.retire_provider(db, provider, reason="Provider role unassigned")
                retired += 1

        if commit:
            db.commit()

        if retired:
            logger.info(f"Unassigned provider role {role.id} from person {person.id} ({retired} records)")
        return retired

    @staticmethod
    def purge_provider_role_from_person(
        db: Session,
        person: Person,
        role: ProviderRole,
        commit: bool = True
    ) -> int:
        """
        Delete every Provider record, retired or not, of a person holding a role.

        Returns:
            Number of records deleted
        """
        require(person, "Person")
        require(role, "Provider role")

        purged = 0
        for provider in provider_queries.get_providers_by_person(db, person, include_retired=True):
            if provider.provider_role_id == role.id:
                provider_queries.purge_provider(db, provider)
                purged += 1

        if commit:
            db.commit()

        if purged:
            logger.info(f"Purged provider role {role.id} from person {person.id} ({purged} records)")
        return purged

    @staticmethod
    def get_providers_by_person(db: Session, person: Person, include_retired: bool = False) -> List[Provider]:
        """Get the Provider records of a person."""
        require(person, "Person")
        return provider_queries.get_providers_by_person(db, person, include_retired=include_retired)

    @staticmethod
    def get_providers_by_roles(db: Session, roles: Sequence[ProviderRole]) -> List[Person]:
        """
        Get the persons holding any of the given roles.

        Args:
            db: Database session
            roles: Non-empty list of roles

        Returns:
            Distinct Person objects ordered by id

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If roles is None or empty
        """
        if not roles:
            raise invalid_argument("Roles cannot be null or empty", argument="roles")

        persons = {p.person.id: p.person for p in provider_queries.get_providers_by_roles(db, roles)}
        return [persons[person_id] for person_id in sorted(persons)]

    @staticmethod
    def get_providers_by_role(db: Session, role: ProviderRole) -> List[Person]:
        """Get the persons holding a role, ordered by id."""
        require(role, "Provider role")
        return ProviderService.get_providers_by_roles(db, [role])

    @staticmethod
    def get_providers_by_relationship_type(db: Session, relationship_type: RelationshipType) -> List[Person]:
        """
        Get the persons whose roles support a relationship type.

        Returns an empty list when no non-retired role supports the type.
        """
        require(relationship_type, "Relationship type")

        roles = role_queries.get_provider_roles_by_relationship_type(db, relationship_type)
        if not roles:
            return []
        return ProviderService.get_providers_by_roles(db, roles)

    @staticmethod
    def get_providers_by_supervisee_role(db: Session, role: ProviderRole) -> List[Person]:
        """Get the persons whose roles may supervise a role."""
        require(role, "Provider role")

        roles = role_queries.get_provider_roles_by_supervisee_role(db, role)
        if not roles:
            return []
        return ProviderService.get_providers_by_roles(db, roles)
