"""
Supervision service.

Manages supervisor -> provider relationships. They use one distinguished
relationship type, resolved at startup into the ProviderManagementContext the
service is built with.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from provider_management.core.context import ProviderManagementContext, get_supervisor_relationship_type
from provider_management.core.exceptions import ErrorKind, ProviderManagementError, require
from provider_management.models import Person, Relationship, RelationshipType
from provider_management.services.role_compatibility_service import RoleCompatibilityService
from provider_management.utils import relationship_queries
from provider_management.utils.assignment_validators import (
    single_active_relationship,
    validate_is_provider,
    verify_persons_are_providers,
)
from provider_management.utils.datetime_utils import DateLike, local_today, resolve_effective_date

logger = logging.getLogger(__name__)


class SupervisionService:
    """
    Service class for provider <-> supervisor assignment operations.

    Example:
        ```python
        with get_db_context() as db:
            supervision = SupervisionService(load_context(db))
            supervision.assign_provider_to_supervisor(db, chw, nurse)
        ```
    """

    def __init__(self, context: ProviderManagementContext):
        self.context = context

    def supervisor_relationship_type(self, db: Session) -> RelationshipType:
        """Get the relationship type used for supervisor -> provider relationships."""
        return get_supervisor_relationship_type(db, self.context)

    def assign_provider_to_supervisor(
        self,
        db: Session,
        provider: Person,
        supervisor: Person,
        on_date: Optional[DateLike] = None,
        commit: bool = True
    ) -> Relationship:
        """
        Assign a provider to a supervisor.

        Args:
            db: Database session
            provider: Provider being supervised
            supervisor: Supervising provider
            on_date: Start date; defaults to today
            commit: If False, leave committing to the caller

        Returns:
            Created Relationship (person A is the supervisor)

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER,
                INVALID_SUPERVISOR or ALREADY_ASSIGNED
        """
        require(supervisor, "Supervisor")
        require(provider, "Provider")

        validate_is_provider(db, supervisor)
        validate_is_provider(db, provider)

        if not RoleCompatibilityService.can_supervise(db, supervisor, provider):
            raise ProviderManagementError(
                ErrorKind.INVALID_SUPERVISOR,
                f"{supervisor} is not a valid supervisor for {provider}",
                supervisor_id=supervisor.id,
                person_id=provider.id,
            )

        effective_date = resolve_effective_date(on_date)
        supervisor_type = self.supervisor_relationship_type(db)

        existing = relationship_queries.get_relationships(
            db, supervisor, provider, supervisor_type, active_on=effective_date
        )
        if not existing:
            existing = relationship_queries.get_relationships(
                db, supervisor, provider, supervisor_type, open_ended_only=True
            )
        if existing:
            raise self._already_assigned(provider, supervisor)

        try:
            relationship = relationship_queries.create_relationship(
                db, supervisor, provider, supervisor_type, effective_date
            )
        except IntegrityError as e:
            logger.warning(f"Supervisor assignment conflict: {e}")
            db.rollback()
            raise self._already_assigned(provider, supervisor, concurrent=True) from e

        if commit:
            db.commit()

        logger.info(f"Assigned provider {provider.id} to supervisor {supervisor.id} starting {effective_date}")
        return relationship

    def unassign_provider_from_supervisor(
        self,
        db: Session,
        provider: Person,
        supervisor: Person,
        on_date: Optional[DateLike] = None,
        commit: bool = True
    ) -> Relationship:
        """
        End the supervision of a provider by a supervisor.

        Returns:
            The ended Relationship

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER,
                NOT_ASSIGNED or INTERNAL_CONSISTENCY_VIOLATION
        """
        require(supervisor, "Supervisor")
        require(provider, "Provider")

        validate_is_provider(db, supervisor)
        validate_is_provider(db, provider)

        effective_date = resolve_effective_date(on_date)

        relationships = relationship_queries.get_relationships(
            db, supervisor, provider, self.supervisor_relationship_type(db), active_on=effective_date
        )
        relationship = single_active_relationship(
            relationships,
            ProviderManagementError(
                ErrorKind.NOT_ASSIGNED,
                f"Provider {provider} is not assigned to supervisor {supervisor}",
                supervisor_id=supervisor.id,
                person_id=provider.id,
            ),
            f"supervisor relationship between {supervisor} and {provider}",
        )

        relationship_queries.end_relationship(db, relationship, effective_date)
        if commit:
            db.commit()

        logger.info(f"Unassigned provider {provider.id} from supervisor {supervisor.id} as of {effective_date}")
        return relationship

    def unassign_all_supervisors_from_provider(self, db: Session, provider: Person, commit: bool = True) -> int:
        """
        End every current supervision of a provider as of today.

        Returns:
            Number of relationships ended
        """
        require(provider, "Provider")
        validate_is_provider(db, provider)

        ended = self._end_all(db, person_a=None, person_b=provider)
        if commit:
            db.commit()

        logger.info(f"Unassigned {ended} supervisors from provider {provider.id}")
        return ended

    def unassign_all_providers_from_supervisor(self, db: Session, supervisor: Person, commit: bool = True) -> int:
        """
        End every current supervision held by a supervisor as of today.

        Returns:
            Number of relationships ended
        """
        require(supervisor, "Supervisor")
        validate_is_provider(db, supervisor)

        ended = self._end_all(db, person_a=supervisor, person_b=None)
        if commit:
            db.commit()

        logger.info(f"Unassigned {ended} supervisees from supervisor {supervisor.id}")
        return ended

    def get_supervisor_relationships_for_provider(
        self,
        db: Session,
        provider: Person,
        on_date: Optional[DateLike] = None
    ) -> List[Relationship]:
        """Get the supervisor relationships of a provider active at a date (default today)."""
        require(provider, "Provider")
        validate_is_provider(db, provider)

        return relationship_queries.get_relationships(
            db, None, provider, self.supervisor_relationship_type(db),
            active_on=resolve_effective_date(on_date)
        )

    def get_supervisors_for_provider(
        self,
        db: Session,
        provider: Person,
        on_date: Optional[DateLike] = None
    ) -> List[Person]:
        """
        Get the supervisors of a provider at a date.

        Returns:
            Distinct supervisor Person objects, ordered by id

        Raises:
            ProviderManagementError(INTERNAL_CONSISTENCY_VIOLATION): If a supervisor is not a provider
        """
        relationships = self.get_supervisor_relationships_for_provider(db, provider, on_date)

        supervisors = {r.person_a.id: r.person_a for r in relationships}
        verify_persons_are_providers(db, supervisors.values(), [r.id for r in relationships])

        return [supervisors[person_id] for person_id in sorted(supervisors)]

    def get_supervisee_relationships_for_supervisor(
        self,
        db: Session,
        supervisor: Person,
        on_date: Optional[DateLike] = None
    ) -> List[Relationship]:
        """Get the supervisee relationships of a supervisor active at a date (default today)."""
        require(supervisor, "Supervisor")
        validate_is_provider(db, supervisor)

        return relationship_queries.get_relationships(
            db, supervisor, None, self.supervisor_relationship_type(db),
            active_on=resolve_effective_date(on_date)
        )

    def get_supervisees_for_supervisor(
        self,
        db: Session,
        supervisor: Person,
        on_date: Optional[DateLike] = None
    ) -> List[Person]:
        """
        Get the providers a supervisor supervises at a date.

        Returns:
            Distinct supervisee Person objects, ordered by id

        Raises:
            ProviderManagementError(INTERNAL_CONSISTENCY_VIOLATION): If a supervisor of a
                returned relationship is not a provider
        """
        relationships = self.get_supervisee_relationships_for_supervisor(db, supervisor, on_date)

        supervisors = {r.person_a.id: r.person_a for r in relationships}
        verify_persons_are_providers(db, supervisors.values(), [r.id for r in relationships])

        supervisees = {r.person_b.id: r.person_b for r in relationships}
        return [supervisees[person_id] for person_id in sorted(supervisees)]

    def _end_all(self, db: Session, person_a: Optional[Person], person_b: Optional[Person]) -> int:
        today = local_today()
        relationships = relationship_queries.get_relationships(
            db, person_a, person_b, self.supervisor_relationship_type(db), active_on=today
        )
        for relationship in relationships:
            relationship_queries.end_relationship(db, relationship, today)
        return len(relationships)

    @staticmethod
    def _already_assigned(provider: Person, supervisor: Person, concurrent: bool = False) -> ProviderManagementError:
        return ProviderManagementError(
            ErrorKind.ALREADY_ASSIGNED,
            f"{provider} is already assigned to {supervisor}",
            supervisor_id=supervisor.id,
            person_id=provider.id,
            concurrent=concurrent,
        )
