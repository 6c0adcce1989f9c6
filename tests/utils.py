"""
Test utilities for provider management tests.
"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from provider_management.models import Patient, Person, Provider, ProviderRole, RelationshipType


def create_person(db: Session, full_name: str, is_voided: bool = False) -> Person:
    """Create and commit a person."""
    person = Person(full_name=full_name, is_voided=is_voided)
    db.add(person)
    db.commit()
    return person


def create_patient(db: Session, full_name: str, is_voided: bool = False) -> Patient:
    """Create and commit a person together with their Patient record."""
    person = create_person(db, full_name)
    patient = Patient(person_id=person.id, is_voided=is_voided)
    db.add(patient)
    db.commit()
    return patient


def create_relationship_type(
    db: Session,
    a_is_to_b: str,
    b_is_to_a: str,
    uuid: Optional[str] = None,
    retired: bool = False
) -> RelationshipType:
    """Create and commit a relationship type."""
    relationship_type = RelationshipType(a_is_to_b=a_is_to_b, b_is_to_a=b_is_to_a, retired=retired)
    if uuid:
        relationship_type.uuid = uuid
    db.add(relationship_type)
    db.commit()
    return relationship_type


def create_role(
    db: Session,
    name: str,
    relationship_types: Iterable[RelationshipType] = (),
    supervisee_roles: Iterable[ProviderRole] = (),
    retired: bool = False
) -> ProviderRole:
    """Create and commit a provider role with its edge sets."""
    role = ProviderRole(name=name, retired=retired)
    role.relationship_types = set(relationship_types)
    role.supervisee_roles = set(supervisee_roles)
    db.add(role)
    db.commit()
    return role


def create_provider(
    db: Session,
    full_name: str,
    role: ProviderRole,
    identifier: Optional[str] = None
) -> Person:
    """Create and commit a person holding a provider role. Returns the person."""
    person = create_person(db, full_name)
    add_provider_record(db, person, role, identifier)
    return person


def add_provider_record(
    db: Session,
    person: Person,
    role: ProviderRole,
    identifier: Optional[str] = None,
    retired: bool = False
) -> Provider:
    """Create and commit a Provider record for an existing person."""
    provider = Provider(
        person_id=person.id,
        provider_role_id=role.id,
        identifier=identifier or f"P-{person.id}-{role.id}",
        retired=retired,
    )
    db.add(provider)
    db.commit()
    return provider
