"""
Relationship model.

A relationship is a directed, time-bounded association between two persons
of a given type. The engine uses two shapes:

- provider -> patient (person A is the provider, person B the patient)
- supervisor -> provider (person A supervises person B, supervisor type)

Relationships are created open-ended and ended by setting end_date; they are
never deleted by the engine, so history is preserved.
"""

from sqlalchemy import ForeignKey, TIMESTAMP, Date, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, date
from typing import Optional

from provider_management.core.database import Base


class Relationship(Base):
    """
    Time-bounded relationship between person A and person B.

    Active at date d when start_date <= d and (end_date is NULL or end_date > d).
    """

    __tablename__ = "relationships"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the relationship."""

    person_a_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"))
    """Reference to person A (provider or supervisor)."""

    person_b_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"))
    """Reference to person B (patient or supervisee)."""

    relationship_type_id: Mapped[int] = mapped_column(ForeignKey("relationship_types.id"))
    """Reference to the relationship type."""

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    """First day the relationship is active (no time component)."""

    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    """First day the relationship is no longer active. NULL while open-ended."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the relationship was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the relationship was last updated (i.e. ended)."""

    # Relationships
    person_a = relationship("Person", foreign_keys=[person_a_id], lazy="joined")
    """Relationship to person A."""

    person_b = relationship("Person", foreign_keys=[person_b_id], lazy="joined")
    """Relationship to person B."""

    relationship_type = relationship("RelationshipType", lazy="joined")
    """Relationship to the RelationshipType."""

    __table_args__ = (
        # At most one open-ended relationship per (A, B, type). Concurrent
        # assignment attempts race on this index; the loser gets an IntegrityError.
        Index(
            'uq_relationships_open_ended',
            'person_a_id', 'person_b_id', 'relationship_type_id',
            unique=True,
            postgresql_where=text('end_date IS NULL'),
            sqlite_where=text('end_date IS NULL'),
        ),
        Index('idx_relationships_person_a_type', 'person_a_id', 'relationship_type_id'),
        Index('idx_relationships_person_b_type', 'person_b_id', 'relationship_type_id'),
    )

    def is_active_on(self, on_date: date) -> bool:
        """Check whether the relationship is active at the given date."""
        if self.start_date > on_date:
            return False
        return self.end_date is None or self.end_date > on_date

    def __repr__(self) -> str:
        return (
            f"<Relationship(id={self.id}, a={self.person_a_id}, b={self.person_b_id}, "
            f"type={self.relationship_type_id}, {self.start_date}..{self.end_date})>"
        )
