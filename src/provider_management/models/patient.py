"""
Patient model.

A patient is a person who receives care. The Patient row shares its key with
the underlying Person, so "is this person a patient" is a primary key lookup.
"""

from sqlalchemy import ForeignKey, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from provider_management.core.database import Base


class Patient(Base):
    """
    Patient entity, one-to-one with Person.

    Patients are assigned to providers through Relationship records where the
    patient is person B.
    """

    __tablename__ = "patients"

    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"), primary_key=True)
    """Reference to the underlying person (also the patient's identifier)."""

    # Voiding support
    is_voided: Mapped[bool] = mapped_column(default=False)
    """Void flag. Voided patients are excluded from assignment queries."""

    voided_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the patient was voided (if applicable)."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the patient record was created."""

    # Relationships
    person = relationship("Person", lazy="joined")
    """Relationship to the underlying Person."""

    def __repr__(self) -> str:
        return f"<Patient(person_id={self.person_id})>"
