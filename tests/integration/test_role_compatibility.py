"""
Integration tests for role compatibility queries.
"""

import pytest
from sqlalchemy.orm import Session

from provider_management.core.exceptions import ErrorKind, ProviderManagementError
from provider_management.models import ProviderRole, RelationshipType
from provider_management.services import PatientAssignmentService, RoleCompatibilityService
from provider_management.utils import relationship_queries
from provider_management.utils.datetime_utils import local_today

from tests.utils import (
    add_provider_record,
    create_person,
    create_relationship_type,
    create_role,
)


class TestProviderRoles:
    """Which roles a person holds."""

    def test_person_without_provider_record(self, db_session, clinic):
        person = create_person(db_session, "Just Someone")

        assert RoleCompatibilityService.is_provider(db_session, person) is False
        assert RoleCompatibilityService.get_provider_roles(db_session, person) == set()

    def test_roles_are_union_over_provider_records(self, db_session, clinic):
        add_provider_record(db_session, clinic.nurse, clinic.chw_role)

        roles = RoleCompatibilityService.get_provider_roles(db_session, clinic.nurse)

        assert roles == {clinic.nurse_role, clinic.chw_role}
        assert RoleCompatibilityService.has_role(db_session, clinic.nurse, clinic.chw_role)

    def test_retired_provider_record_still_makes_a_provider_but_grants_no_role(self, db_session, clinic):
        person = create_person(db_session, "Former Nurse")
        add_provider_record(db_session, person, clinic.nurse_role, retired=True)

        assert RoleCompatibilityService.is_provider(db_session, person) is True
        assert RoleCompatibilityService.get_provider_roles(db_session, person) == set()
        assert not RoleCompatibilityService.has_role(db_session, person, clinic.nurse_role)

    def test_null_person_is_rejected(self, db_session):
        with pytest.raises(ProviderManagementError) as exc:
            RoleCompatibilityService.get_provider_roles(db_session, None)

        assert exc.value.kind is ErrorKind.INVALID_ARGUMENT


class TestRelationshipTypeSupport:
    """Which relationship types a person's roles support."""

    def test_supports_relationship_type(self, db_session, clinic):
        assert RoleCompatibilityService.supports_relationship_type(db_session, clinic.nurse, clinic.treats)
        assert not RoleCompatibilityService.supports_relationship_type(db_session, clinic.nurse, clinic.accompanies)
        assert RoleCompatibilityService.supports_relationship_type(db_session, clinic.chw, clinic.accompanies)

    def test_all_provider_relationship_types(self, db_session, clinic):
        types = RoleCompatibilityService.get_all_provider_relationship_types(db_session)

        assert types == {clinic.treats, clinic.accompanies}
        assert clinic.supervisor_type not in types

    def test_types_of_retired_roles_only_appear_when_asked(self, db_session, clinic):
        counsels = create_relationship_type(db_session, "Counselor", "Client")
        create_role(db_session, "Counselor", relationship_types=[counsels], retired=True)

        active = RoleCompatibilityService.get_all_provider_relationship_types(db_session)
        everything = RoleCompatibilityService.get_all_provider_relationship_types(db_session, include_retired=True)

        assert counsels not in active
        assert counsels in everything
        assert active <= everything

    def test_retired_relationship_types_are_skipped(self, db_session, clinic):
        clinic.accompanies.retired = True
        db_session.commit()

        types = RoleCompatibilityService.get_all_provider_relationship_types(db_session)

        assert types == {clinic.treats}
        assert not RoleCompatibilityService.is_provider_relationship_type(db_session, clinic.accompanies)

    def test_filter_provider_relationships(self, db_session, clinic):
        today = local_today()
        treating = relationship_queries.create_relationship(
            db_session, clinic.nurse, clinic.patient.person, clinic.treats, today
        )
        supervising = relationship_queries.create_relationship(
            db_session, clinic.nurse, clinic.chw, clinic.supervisor_type, today
        )
        db_session.commit()

        filtered = RoleCompatibilityService.filter_provider_relationships(db_session, [treating, supervising])

        assert filtered == [treating]


class TestSupervisionCompatibility:
    """Which roles a person may supervise."""

    def test_nurse_can_supervise_community_health_worker(self, db_session, clinic):
        assert RoleCompatibilityService.get_provider_roles_that_provider_can_supervise(
            db_session, clinic.nurse
        ) == {clinic.chw_role}
        assert RoleCompatibilityService.can_supervise(db_session, clinic.nurse, clinic.chw)

    def test_supervision_is_directional(self, db_session, clinic):
        assert not RoleCompatibilityService.can_supervise(db_session, clinic.chw, clinic.nurse)

    def test_nobody_supervises_themselves(self, db_session, clinic):
        """Even a role that lists itself as supervisee does not allow self supervision."""
        clinic.nurse_role.supervisee_roles.add(clinic.nurse_role)
        db_session.commit()

        assert RoleCompatibilityService.can_supervise(db_session, clinic.other_nurse, clinic.nurse)
        assert not RoleCompatibilityService.can_supervise(db_session, clinic.nurse, clinic.nurse)

    def test_supervision_is_not_transitive(self, db_session, clinic):
        doctor_role = create_role(db_session, "Doctor", supervisee_roles=[clinic.nurse_role])
        doctor = create_person(db_session, "Doctor Frank")
        add_provider_record(db_session, doctor, doctor_role)

        assert RoleCompatibilityService.can_supervise(db_session, doctor, clinic.nurse)
        assert not RoleCompatibilityService.can_supervise(db_session, doctor, clinic.chw)

    def test_non_provider_supervises_nobody(self, db_session, clinic):
        person = create_person(db_session, "Just Someone")

        assert RoleCompatibilityService.get_provider_roles_that_provider_can_supervise(db_session, person) == set()
        assert not RoleCompatibilityService.can_supervise(db_session, person, clinic.chw)


def load_in_other_session(db_engine, model, object_id):
    """Load an object in a separate, already closed session."""
    with Session(bind=db_engine, expire_on_commit=False) as other:
        return other.get(model, object_id)


class TestObjectsFromAnotherSession:
    """Roles and types loaded in an earlier unit of work compare by id."""

    def test_relationship_type_from_another_session(self, db_session, db_engine, clinic):
        treats = load_in_other_session(db_engine, RelationshipType, clinic.treats.id)
        assert treats is not clinic.treats

        assert RoleCompatibilityService.supports_relationship_type(db_session, clinic.nurse, treats)
        assert RoleCompatibilityService.is_provider_relationship_type(db_session, treats)
        assert clinic.nurse_role.supports_relationship_type(treats)

    def test_role_from_another_session(self, db_session, db_engine, clinic):
        chw_role = load_in_other_session(db_engine, ProviderRole, clinic.chw_role.id)
        assert chw_role is not clinic.chw_role

        assert RoleCompatibilityService.has_role(db_session, clinic.chw, chw_role)
        assert clinic.nurse_role.can_supervise_role(chw_role)
        assert not RoleCompatibilityService.has_role(db_session, clinic.nurse, chw_role)

    def test_assignment_accepts_type_from_another_session(self, db_session, db_engine, clinic):
        treats = load_in_other_session(db_engine, RelationshipType, clinic.treats.id)

        relationship = PatientAssignmentService.assign_patient_to_provider(
            db_session, clinic.patient, clinic.nurse, treats
        )

        assert relationship.relationship_type_id == clinic.treats.id
        assert PatientAssignmentService.get_patients_of_provider(db_session, clinic.nurse) == [clinic.patient]
