"""
Person model representing any individual known to the system.

Persons are owned by the person-management collaborator. The engine only
reads them: a person becomes a provider by holding Provider records and a
patient by having a Patient record.
"""

import uuid as uuid_lib
from sqlalchemy import String, TIMESTAMP, Date, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, date
from typing import Optional

from provider_management.core.constants import MAX_STRING_LENGTH, UUID_LENGTH
from provider_management.core.database import Base


class Person(Base):
    """
    Person entity.

    A person may at the same time be a patient, a provider with several
    provider records, and a supervisor of other providers.
    """

    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the person."""

    uuid: Mapped[str] = mapped_column(
        String(UUID_LENGTH), unique=True, default=lambda: str(uuid_lib.uuid4())
    )
    """Globally unique identifier, stable across systems."""

    full_name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name of the person."""

    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    """Optional gender. Valid values: 'male', 'female', 'other'."""

    birthdate: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    """Optional birthdate (date only, no time)."""

    # Voiding support
    is_voided: Mapped[bool] = mapped_column(default=False)
    """Void flag. Voided persons cannot take part in new assignments."""

    voided_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the person was voided (if applicable)."""

    void_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Reason given when voiding."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the person was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the person was last updated."""

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, full_name={self.full_name!r})>"
