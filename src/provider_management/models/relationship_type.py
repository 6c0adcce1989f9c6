"""
Relationship type model.

Relationship types tag the semantic kind of a relationship between two
persons (e.g. "Supervisor / Supervisee", "Nurse / Patient"). They are owned by
the person-management collaborator; the engine looks them up and reads their
retired flag.
"""

import uuid as uuid_lib
from sqlalchemy import String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from provider_management.core.constants import MAX_STRING_LENGTH, UUID_LENGTH
from provider_management.core.database import Base


class RelationshipType(Base):
    """
    Relationship type entity.

    Read as "person A is <a_is_to_b> to person B" and
    "person B is <b_is_to_a> to person A".
    """

    __tablename__ = "relationship_types"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the relationship type."""

    uuid: Mapped[str] = mapped_column(
        String(UUID_LENGTH), unique=True, default=lambda: str(uuid_lib.uuid4())
    )
    """Well-known identifier used to look up distinguished types."""

    a_is_to_b: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Role of person A toward person B (e.g. "Supervisor")."""

    b_is_to_a: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Role of person B toward person A (e.g. "Supervisee")."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional free-text description."""

    retired: Mapped[bool] = mapped_column(default=False)
    """Retired types are ignored unless a query asks for retired data."""

    retired_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the type was retired (if applicable)."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the type was created."""

    def __repr__(self) -> str:
        return f"<RelationshipType(id={self.id}, {self.a_is_to_b}/{self.b_is_to_a})>"

    def __str__(self) -> str:
        return f"{self.a_is_to_b}/{self.b_is_to_a}"
