"""
Relationship store: queries and writes for time-bounded relationships.

All date filtering uses the engine's activity rule: a relationship is active
at date d when start_date <= d and (end_date IS NULL or end_date > d).
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, Query

from provider_management.models import Person, Relationship, RelationshipType

logger = logging.getLogger(__name__)


def filter_active_on(query: Query[Relationship], on_date: date) -> Query[Relationship]:
    """
    Restrict a relationship query to relationships active at a date.

    Args:
        query: Base query for Relationship
        on_date: Effective date (no time component)

    Returns:
        Filtered query
    """
    return query.filter(
        Relationship.start_date <= on_date,
        or_(Relationship.end_date.is_(None), Relationship.end_date > on_date)
    )


def get_relationships(
    db: Session,
    person_a: Optional[Person] = None,
    person_b: Optional[Person] = None,
    relationship_type: Optional[RelationshipType] = None,
    active_on: Optional[date] = None,
    open_ended_only: bool = False
) -> List[Relationship]:
    """
    Query relationships by any combination of person A, person B and type.

    Args:
        db: Database session
        person_a: Optional person A filter
        person_b: Optional person B filter
        relationship_type: Optional relationship type filter
        active_on: Optional date; only relationships active at that date are returned
        open_ended_only: If True, only relationships without an end date are returned,
            whatever their start date

    Returns:
        List of Relationship objects ordered by id
    """
    query = db.query(Relationship)
    if person_a is not None:
        query = query.filter(Relationship.person_a_id == person_a.id)
    if person_b is not None:
        query = query.filter(Relationship.person_b_id == person_b.id)
    if relationship_type is not None:
        query = query.filter(Relationship.relationship_type_id == relationship_type.id)
    if active_on is not None:
        query = filter_active_on(query, active_on)
    if open_ended_only:
        query = query.filter(Relationship.end_date.is_(None))
    return query.order_by(Relationship.id).all()


def create_relationship(
    db: Session,
    person_a: Person,
    person_b: Person,
    relationship_type: RelationshipType,
    start_date: date
) -> Relationship:
    """
    Create an open-ended relationship and flush it.

    Flushing surfaces a uniqueness violation (IntegrityError) immediately, so
    callers can translate it while still inside their unit of work.

    Returns:
        The new Relationship
    """
    relationship = Relationship(
        person_a_id=person_a.id,
        person_b_id=person_b.id,
        relationship_type_id=relationship_type.id,
        start_date=start_date,
        end_date=None,
    )
    db.add(relationship)
    db.flush()
    return relationship


def end_relationship(db: Session, relationship: Relationship, end_date: date) -> Relationship:
    """Set the end date of a relationship and flush it."""
    relationship.end_date = end_date
    db.flush()
    return relationship


def get_relationship_type_by_uuid(db: Session, uuid: str) -> Optional[RelationshipType]:
    return db.query(RelationshipType).filter(RelationshipType.uuid == uuid).first()


def get_or_create_relationship_type(
    db: Session,
    uuid: str,
    a_is_to_b: str,
    b_is_to_a: str,
    description: Optional[str] = None
) -> RelationshipType:
    """
    Get a relationship type by UUID, creating it if missing.

    Used to seed well-known types such as the supervisor type. Flushes but
    does not commit.
    """
    relationship_type = get_relationship_type_by_uuid(db, uuid)
    if relationship_type is not None:
        return relationship_type

    relationship_type = RelationshipType(
        uuid=uuid,
        a_is_to_b=a_is_to_b,
        b_is_to_a=b_is_to_a,
        description=description,
    )
    db.add(relationship_type)
    db.flush()
    logger.info(f"Created relationship type {relationship_type} ({uuid})")
    return relationship_type
