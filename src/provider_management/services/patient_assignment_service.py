"""
Patient assignment service.

This module contains business logic for assigning patients to providers
through time-bounded relationships. Assignments are ended by end-dating the
relationship, never by deleting it, so the assignment history is preserved.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from provider_management.core.exceptions import ErrorKind, ProviderManagementError, invalid_argument, require
from provider_management.models import Patient, Person, Relationship, RelationshipType
from provider_management.services.role_compatibility_service import RoleCompatibilityService
from provider_management.utils import relationship_queries
from provider_management.utils.assignment_validators import (
    single_active_relationship,
    validate_is_provider,
    validate_not_voided,
    validate_provider_relationship_type,
    verify_persons_are_providers,
)
from provider_management.utils.datetime_utils import DateLike, local_today, resolve_effective_date
from provider_management.utils.patient_queries import get_active_patient

logger = logging.getLogger(__name__)


class PatientAssignmentService:
    """
    Service class for provider <-> patient assignment operations.
    """

    @staticmethod
    def assign_patient_to_provider(
        db: Session,
        patient: Patient,
        provider: Person,
        relationship_type: RelationshipType,
        on_date: Optional[DateLike] = None,
        commit: bool = True
    ) -> Relationship:
        """
        Assign a patient to a provider.

        Args:
            db: Database session
            patient: Patient to assign
            provider: Provider (person) taking the patient
            relationship_type: Kind of provider/patient relationship
            on_date: Start date of the assignment; defaults to today
            commit: If False, leave committing to the caller

        Returns:
            Created Relationship

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER,
                ROLE_DOES_NOT_SUPPORT_TYPE or ALREADY_ASSIGNED
        """
        require(patient, "Patient")
        require(provider, "Provider")
        require(relationship_type, "Relationship type")

        if patient.is_voided:
            raise invalid_argument("Patient cannot be voided", patient_id=patient.person_id)
        validate_not_voided(patient.person, "Patient")
        validate_not_voided(provider, "Provider")

        validate_is_provider(db, provider)

        if not RoleCompatibilityService.supports_relationship_type(db, provider, relationship_type):
            raise ProviderManagementError(
                ErrorKind.ROLE_DOES_NOT_SUPPORT_TYPE,
                f"{provider} cannot support {relationship_type}",
                person_id=provider.id,
                relationship_type_id=relationship_type.id,
            )

        effective_date = resolve_effective_date(on_date)

        existing = relationship_queries.get_relationships(
            db, provider, patient.person, relationship_type, active_on=effective_date
        )
        if not existing:
            # An open-ended relationship starting later would also collide with the new one
            existing = relationship_queries.get_relationships(
                db, provider, patient.person, relationship_type, open_ended_only=True
            )
        if existing:
            raise PatientAssignmentService._already_assigned(provider, patient, relationship_type)

        try:
            relationship = relationship_queries.create_relationship(
                db, provider, patient.person, relationship_type, effective_date
            )
        except IntegrityError as e:
            # Another unit of work created the same open-ended relationship first.
            # The session must be rolled back, which also discards the caller's pending work.
            logger.warning(f"Patient assignment conflict: {e}")
            db.rollback()
            raise PatientAssignmentService._already_assigned(
                provider, patient, relationship_type, concurrent=True
            ) from e

        if commit:
            db.commit()

        logger.info(
            f"Assigned patient {patient.person_id} to provider {provider.id} "
            f"with relationship type {relationship_type.id} starting {effective_date}"
        )
        return relationship

    @staticmethod
    def unassign_patient_from_provider(
        db: Session,
        patient: Patient,
        provider: Person,
        relationship_type: RelationshipType,
        on_date: Optional[DateLike] = None,
        commit: bool = True
    ) -> Relationship:
        """
        End the assignment of a patient to a provider.

        Args:
            db: Database session
            patient: Assigned patient
            provider: Provider (person) currently holding the patient
            relationship_type: Kind of provider/patient relationship
            on_date: End date; defaults to today
            commit: If False, leave committing to the caller

        Returns:
            The ended Relationship

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER,
                INVALID_RELATIONSHIP_TYPE, NOT_ASSIGNED or INTERNAL_CONSISTENCY_VIOLATION
        """
        require(patient, "Patient")
        require(provider, "Provider")
        require(relationship_type, "Relationship type")

        validate_is_provider(db, provider)
        # The provider need not support the type any more, but it must be a provider type
        validate_provider_relationship_type(db, relationship_type)

        effective_date = resolve_effective_date(on_date)

        relationships = relationship_queries.get_relationships(
            db, provider, patient.person, relationship_type, active_on=effective_date
        )
        relationship = single_active_relationship(
            relationships,
            ProviderManagementError(
                ErrorKind.NOT_ASSIGNED,
                f"Provider {provider} is not assigned to patient {patient.person_id} with a {relationship_type} relationship",
                person_id=provider.id,
                patient_id=patient.person_id,
                relationship_type_id=relationship_type.id,
            ),
            f"{relationship_type} between {provider} and patient {patient.person_id}",
        )

        relationship_queries.end_relationship(db, relationship, effective_date)
        if commit:
            db.commit()

        logger.info(
            f"Unassigned patient {patient.person_id} from provider {provider.id} "
            f"with relationship type {relationship_type.id} as of {effective_date}"
        )
        return relationship

    @staticmethod
    def unassign_all_patients_from_provider(
        db: Session,
        provider: Person,
        relationship_type: Optional[RelationshipType] = None,
        commit: bool = True
    ) -> int:
        """
        End every current patient assignment of a provider as of today.

        Args:
            db: Database session
            provider: Provider (person)
            relationship_type: Only end this type; all provider relationship types if None
            commit: If False, leave committing to the caller

        Returns:
            Number of relationships ended
        """
        require(provider, "Provider")

        validate_is_provider(db, provider)

        if relationship_type is None:
            relationship_types = RoleCompatibilityService.get_all_provider_relationship_types(db)
        else:
            validate_provider_relationship_type(db, relationship_type)
            relationship_types = {relationship_type}

        today = local_today()
        ended = 0
        for rt in sorted(relationship_types, key=lambda t: t.id):
            for relationship in relationship_queries.get_relationships(db, provider, None, rt, active_on=today):
                relationship_queries.end_relationship(db, relationship, today)
                ended += 1

        if commit:
            db.commit()

        logger.info(f"Unassigned {ended} patient relationships from provider {provider.id}")
        return ended

    @staticmethod
    def get_patients_of_provider(
        db: Session,
        provider: Person,
        relationship_type: Optional[RelationshipType] = None,
        on_date: Optional[DateLike] = None
    ) -> List[Patient]:
        """
        Get the patients assigned to a provider at a date.

        Args:
            db: Database session
            provider: Provider (person)
            relationship_type: Optional relationship type filter; all provider types if None
            on_date: Effective date; defaults to today

        Returns:
            List of distinct non-voided Patient objects, ordered by person id
        """
        require(provider, "Provider")

        validate_is_provider(db, provider)
        if relationship_type is not None:
            validate_provider_relationship_type(db, relationship_type)

        effective_date = resolve_effective_date(on_date)

        relationships = relationship_queries.get_relationships(
            db, provider, None, relationship_type, active_on=effective_date
        )
        if relationship_type is None:
            relationships = RoleCompatibilityService.filter_provider_relationships(db, relationships)

        patients: Dict[int, Patient] = {}
        for relationship in relationships:
            patient = get_active_patient(db, relationship.person_b_id)
            if patient is None:
                logger.warning(
                    f"Skipping relationship {relationship.id}: person {relationship.person_b_id} "
                    f"is not an active patient"
                )
                continue
            patients[patient.person_id] = patient

        return [patients[person_id] for person_id in sorted(patients)]

    @staticmethod
    def get_provider_relationships_for_patient(
        db: Session,
        patient: Patient,
        provider: Optional[Person] = None,
        relationship_type: Optional[RelationshipType] = None,
        on_date: Optional[DateLike] = None
    ) -> List[Relationship]:
        """
        Get the provider relationships of a patient at a date.

        Args:
            db: Database session
            patient: Patient
            provider: Optional provider filter
            relationship_type: Optional relationship type filter; all provider types if None
            on_date: Effective date; defaults to today

        Returns:
            List of Relationship objects

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER or INVALID_RELATIONSHIP_TYPE
        """
        require(patient, "Patient")

        if provider is not None:
            validate_is_provider(db, provider)
        if relationship_type is not None:
            validate_provider_relationship_type(db, relationship_type)

        effective_date = resolve_effective_date(on_date)

        relationships = relationship_queries.get_relationships(
            db, provider, patient.person, relationship_type, active_on=effective_date
        )
        if relationship_type is None:
            relationships = RoleCompatibilityService.filter_provider_relationships(db, relationships)

        return relationships

    @staticmethod
    def get_providers_for_patient(
        db: Session,
        patient: Patient,
        relationship_type: Optional[RelationshipType] = None,
        on_date: Optional[DateLike] = None
    ) -> List[Person]:
        """
        Get the providers assigned to a patient at a date.

        Args:
            db: Database session
            patient: Patient
            relationship_type: Optional relationship type filter; all provider types if None
            on_date: Effective date; defaults to today

        Returns:
            List of distinct provider Person objects, ordered by id

        Raises:
            ProviderManagementError(INTERNAL_CONSISTENCY_VIOLATION): If a relationship
                points at a person who is not a provider
        """
        relationships = PatientAssignmentService.get_provider_relationships_for_patient(
            db, patient, None, relationship_type, on_date
        )

        providers = {r.person_a.id: r.person_a for r in relationships}
        verify_persons_are_providers(db, providers.values(), [r.id for r in relationships])

        return [providers[person_id] for person_id in sorted(providers)]

    @staticmethod
    def transfer_all_patients(
        db: Session,
        source_provider: Person,
        destination_provider: Person,
        relationship_type: Optional[RelationshipType] = None
    ) -> int:
        """
        Move every current patient of one provider to another.

        Patients already assigned to the destination are left as they are. The
        transfer is one unit of work: either every patient moves or nothing
        changes.

        Args:
            db: Database session
            source_provider: Provider giving up the patients
            destination_provider: Provider taking the patients
            relationship_type: Only transfer this type; all provider relationship types if None

        Returns:
            Number of patient relationships moved off the source provider

        Raises:
            ProviderManagementError: INVALID_ARGUMENT, PERSON_IS_NOT_PROVIDER,
                SAME_SOURCE_AND_DESTINATION, INVALID_RELATIONSHIP_TYPE,
                ROLE_DOES_NOT_SUPPORT_TYPE or INTERNAL_CONSISTENCY_VIOLATION
        """
        require(source_provider, "Source provider")
        require(destination_provider, "Destination provider")

        validate_is_provider(db, source_provider)
        validate_is_provider(db, destination_provider)

        if source_provider.id == destination_provider.id:
            raise ProviderManagementError(
                ErrorKind.SAME_SOURCE_AND_DESTINATION,
                f"Provider {source_provider} is the same as provider {destination_provider}",
                person_id=source_provider.id,
            )

        relationship_types: Set[RelationshipType]
        if relationship_type is None:
            relationship_types = RoleCompatibilityService.get_all_provider_relationship_types(db)
        else:
            validate_provider_relationship_type(db, relationship_type)
            relationship_types = {relationship_type}

        today = local_today()
        moved = 0
        try:
            for rt in sorted(relationship_types, key=lambda t: t.id):
                moved += PatientAssignmentService._transfer_patients_of_type(
                    db, source_provider, destination_provider, rt, today
                )
        except Exception:
            db.rollback()
            raise

        db.commit()

        logger.info(
            f"Transferred {moved} patient relationships from provider {source_provider.id} "
            f"to provider {destination_provider.id}"
        )
        return moved

    @staticmethod
    def _transfer_patients_of_type(
        db: Session,
        source_provider: Person,
        destination_provider: Person,
        relationship_type: RelationshipType,
        on_date: date
    ) -> int:
        patients = PatientAssignmentService.get_patients_of_provider(
            db, source_provider, relationship_type, on_date
        )

        for patient in patients:
            try:
                PatientAssignmentService.assign_patient_to_provider(
                    db, patient, destination_provider, relationship_type, on_date, commit=False
                )
            except ProviderManagementError as e:
                # Already holding the patient is fine; a lost race rolled the session back and is not
                if e.kind is not ErrorKind.ALREADY_ASSIGNED or e.context.get("concurrent"):
                    raise

            try:
                PatientAssignmentService.unassign_patient_from_provider(
                    db, patient, source_provider, relationship_type, on_date, commit=False
                )
            except ProviderManagementError as e:
                if e.kind is not ErrorKind.NOT_ASSIGNED:
                    raise
                # The patient was just read as assigned to the source provider
                logger.error(
                    f"Patient {patient.person_id} vanished from provider {source_provider.id} during transfer"
                )
                raise ProviderManagementError(
                    ErrorKind.INTERNAL_CONSISTENCY_VIOLATION,
                    "All patients here should be assigned to provider",
                    person_id=source_provider.id,
                    patient_id=patient.person_id,
                ) from e

        return len(patients)

    @staticmethod
    def _already_assigned(
        provider: Person,
        patient: Patient,
        relationship_type: RelationshipType,
        concurrent: bool = False
    ) -> ProviderManagementError:
        return ProviderManagementError(
            ErrorKind.ALREADY_ASSIGNED,
            f"Provider {provider} is already assigned to patient {patient.person_id} with a {relationship_type} relationship",
            person_id=provider.id,
            patient_id=patient.person_id,
            relationship_type_id=relationship_type.id,
            concurrent=concurrent,
        )
