"""
Integration tests for supervisor <-> provider assignments.
"""

import pytest
from datetime import date, timedelta

from provider_management.core.exceptions import ErrorKind, ProviderManagementError
from provider_management.models import Relationship
from provider_management.services import ProviderService, SupervisionService
from provider_management.utils import relationship_queries
from provider_management.utils.datetime_utils import local_today

from tests.utils import create_person, create_provider


class TestAssignProviderToSupervisor:
    """Test cases for assign_provider_to_supervisor."""

    def test_creates_supervisor_relationship(self, db_session, clinic, supervision):
        relationship = supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse)

        assert relationship.person_a_id == clinic.nurse.id
        assert relationship.person_b_id == clinic.chw.id
        assert relationship.relationship_type_id == clinic.supervisor_type.id
        assert relationship.end_date is None

    def test_incompatible_supervisor_is_rejected(self, db_session, clinic, supervision):
        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.nurse, clinic.chw)

        assert exc.value.kind is ErrorKind.INVALID_SUPERVISOR
        assert db_session.query(Relationship).count() == 0

    def test_self_supervision_is_rejected(self, db_session, clinic, supervision):
        clinic.nurse_role.supervisee_roles.add(clinic.nurse_role)
        db_session.commit()

        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.nurse, clinic.nurse)

        assert exc.value.kind is ErrorKind.INVALID_SUPERVISOR

    def test_duplicate_is_already_assigned(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse, date(2024, 1, 1))

        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse, date(2024, 6, 1))

        assert exc.value.kind is ErrorKind.ALREADY_ASSIGNED

    def test_future_open_ended_supervision_is_already_assigned(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(
            db_session, clinic.chw, clinic.nurse, local_today() + timedelta(days=3)
        )

        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse)

        assert exc.value.kind is ErrorKind.ALREADY_ASSIGNED
        assert exc.value.context["concurrent"] is False
        assert db_session.query(Relationship).count() == 1

    def test_both_sides_must_be_providers(self, db_session, clinic, supervision):
        stranger = create_person(db_session, "Just Someone")

        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, stranger, clinic.nurse)
        assert exc.value.kind is ErrorKind.PERSON_IS_NOT_PROVIDER

        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.chw, stranger)
        assert exc.value.kind is ErrorKind.PERSON_IS_NOT_PROVIDER

    def test_missing_supervisor_is_rejected(self, db_session, clinic, supervision):
        with pytest.raises(ProviderManagementError) as exc:
            supervision.assign_provider_to_supervisor(db_session, clinic.chw, None)

        assert exc.value.kind is ErrorKind.INVALID_ARGUMENT


class TestUnassignSupervision:
    """Test cases for ending supervision."""

    def test_unassign_provider_from_supervisor(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse, date(2024, 1, 1))

        relationship = supervision.unassign_provider_from_supervisor(
            db_session, clinic.chw, clinic.nurse, date(2024, 3, 1)
        )

        assert relationship.end_date == date(2024, 3, 1)
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse, date(2024, 2, 1)) == [clinic.chw]
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse, date(2024, 3, 1)) == []

    def test_unassign_when_not_assigned(self, db_session, clinic, supervision):
        with pytest.raises(ProviderManagementError) as exc:
            supervision.unassign_provider_from_supervisor(db_session, clinic.chw, clinic.nurse)

        assert exc.value.kind is ErrorKind.NOT_ASSIGNED

    def test_unassign_all_supervisors_from_provider(self, db_session, clinic, supervision):
        yesterday = local_today() - timedelta(days=1)
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse, yesterday)
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.other_nurse, yesterday)

        ended = supervision.unassign_all_supervisors_from_provider(db_session, clinic.chw)

        assert ended == 2
        assert supervision.get_supervisors_for_provider(db_session, clinic.chw) == []
        assert supervision.get_supervisors_for_provider(db_session, clinic.chw, yesterday) == [
            clinic.nurse, clinic.other_nurse
        ]

    def test_unassign_all_providers_from_supervisor(self, db_session, clinic, supervision):
        second_chw = create_provider(db_session, "Worker Hank", clinic.chw_role)
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse)
        supervision.assign_provider_to_supervisor(db_session, second_chw, clinic.nurse)
        supervision.assign_provider_to_supervisor(db_session, second_chw, clinic.other_nurse)

        ended = supervision.unassign_all_providers_from_supervisor(db_session, clinic.nurse)

        assert ended == 2
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse) == []
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.other_nurse) == [second_chw]


class TestSupervisionQueries:
    """Test cases for supervision lookups."""

    def test_supervisors_and_supervisees(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse)

        assert supervision.get_supervisors_for_provider(db_session, clinic.chw) == [clinic.nurse]
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse) == [clinic.chw]
        assert supervision.get_supervisees_for_supervisor(db_session, clinic.chw) == []

    def test_queries_honor_the_date(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse, date(2024, 5, 1))

        assert supervision.get_supervisor_relationships_for_provider(db_session, clinic.chw, date(2024, 4, 30)) == []
        assert len(supervision.get_supervisor_relationships_for_provider(db_session, clinic.chw, date(2024, 5, 1))) == 1

    def test_patient_relationships_are_not_supervision(self, db_session, clinic, supervision):
        relationship_queries.create_relationship(
            db_session, clinic.nurse, clinic.chw, clinic.treats, local_today()
        )
        db_session.commit()

        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse) == []

    def test_query_requires_provider(self, db_session, clinic, supervision):
        with pytest.raises(ProviderManagementError) as exc:
            supervision.get_supervisors_for_provider(db_session, clinic.patient.person)

        assert exc.value.kind is ErrorKind.PERSON_IS_NOT_PROVIDER

    def test_supervisee_who_is_not_a_provider_is_still_listed(self, db_session, clinic, supervision):
        """Only the supervisor side of each relationship is checked."""
        outsider = create_person(db_session, "Outsider")
        relationship_queries.create_relationship(
            db_session, clinic.nurse, outsider, clinic.supervisor_type, local_today()
        )
        db_session.commit()

        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse) == [outsider]

    def test_supervisee_with_purged_provider_records_is_still_listed(self, db_session, clinic, supervision):
        supervision.assign_provider_to_supervisor(db_session, clinic.chw, clinic.nurse)
        ProviderService.purge_provider_role_from_person(db_session, clinic.chw, clinic.chw_role)

        assert supervision.get_supervisees_for_supervisor(db_session, clinic.nurse) == [clinic.chw]

    def test_supervisor_who_is_not_a_provider_is_a_consistency_violation(self, db_session, clinic, supervision):
        relationship_queries.create_relationship(
            db_session, clinic.nurse, clinic.chw, clinic.supervisor_type, local_today()
        )
        db_session.commit()
        ProviderService.purge_provider_role_from_person(db_session, clinic.nurse, clinic.nurse_role)

        with pytest.raises(ProviderManagementError) as exc:
            supervision.get_supervisors_for_provider(db_session, clinic.chw)

        assert exc.value.kind is ErrorKind.INTERNAL_CONSISTENCY_VIOLATION


class TestSupervisionContext:
    """The service uses the supervisor type resolved into its context."""

    def test_uses_context_relationship_type(self, db_session, clinic, context):
        service = SupervisionService(context)

        assert service.supervisor_relationship_type(db_session) is clinic.supervisor_type

    def test_context_pointing_at_deleted_type(self, db_session, clinic, context):
        db_session.delete(clinic.supervisor_type)
        db_session.commit()

        with pytest.raises(ProviderManagementError) as exc:
            SupervisionService(context).supervisor_relationship_type(db_session)

        assert exc.value.kind is ErrorKind.CONFIGURATION_ERROR
