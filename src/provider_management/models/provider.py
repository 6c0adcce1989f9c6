"""
Provider model.

A Provider record binds a person to exactly one provider role under a
provider identifier. A person may hold several concurrent records, each with
its own role.
"""

from sqlalchemy import ForeignKey, String, Text, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional

from provider_management.core.constants import MAX_IDENTIFIER_LENGTH
from provider_management.core.database import Base


class Provider(Base):
    """
    Provider record: a person acting in a provider role.

    Records are retired rather than deleted when a role is taken away; purging
    is reserved for data corrections.
    """

    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the provider record."""

    person_id: Mapped[int] = mapped_column(ForeignKey("persons.id", ondelete="CASCADE"))
    """Reference to the person acting as provider."""

    identifier: Mapped[str] = mapped_column(String(MAX_IDENTIFIER_LENGTH))
    """Provider identifier (e.g. staff number)."""

    provider_role_id: Mapped[int] = mapped_column(ForeignKey("provider_roles.id", ondelete="RESTRICT"))
    """Reference to the role. RESTRICT keeps referenced roles from being purged."""

    retired: Mapped[bool] = mapped_column(default=False)
    """Soft retire flag."""

    retired_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the record was retired (if applicable)."""

    retire_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Reason given when retiring."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the record was created."""

    # Relationships
    person = relationship("Person")
    """Relationship to the Person acting as provider."""

    provider_role = relationship("ProviderRole", lazy="joined")
    """Relationship to the ProviderRole held through this record."""

    __table_args__ = (
        Index('idx_providers_person', 'person_id', 'retired'),
        Index('idx_providers_role', 'provider_role_id'),
    )

    def __repr__(self) -> str:
        return f"<Provider(id={self.id}, person_id={self.person_id}, role_id={self.provider_role_id}, retired={self.retired})>"
