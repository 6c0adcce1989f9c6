"""
Provider role model and the role graph association tables.

A provider role (e.g. "Nurse", "Community Health Worker") declares which
provider/patient relationship types its holders may take part in and which
other roles its holders may supervise. Supervision edges are stored as a
plain adjacency table: a role supervises exactly the roles it lists, never
roles reachable through them.
"""

import uuid as uuid_lib
from datetime import datetime
from typing import Optional, Set

from sqlalchemy import Column, ForeignKey, String, Table, Text, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from provider_management.core.constants import MAX_STRING_LENGTH, UUID_LENGTH
from provider_management.core.database import Base
from provider_management.models.relationship_type import RelationshipType


provider_role_relationship_types = Table(
    "provider_role_relationship_types",
    Base.metadata,
    Column("provider_role_id", ForeignKey("provider_roles.id", ondelete="CASCADE"), primary_key=True),
    Column("relationship_type_id", ForeignKey("relationship_types.id", ondelete="CASCADE"), primary_key=True),
)
"""Relationship types each role supports."""

# No ON DELETE CASCADE on the supervisee side: edges pointing at a role must be
# detached explicitly before the role can be purged.
provider_role_supervisee_roles = Table(
    "provider_role_supervisee_roles",
    Base.metadata,
    Column("provider_role_id", ForeignKey("provider_roles.id", ondelete="CASCADE"), primary_key=True),
    Column("supervisee_provider_role_id", ForeignKey("provider_roles.id"), primary_key=True),
    Index("idx_provider_role_supervisee_roles_supervisee", "supervisee_provider_role_id"),
)
"""Directed supervision edges: provider_role_id may supervise supervisee_provider_role_id."""


class ProviderRole(Base):
    """
    Provider role entity, a node of the supervision graph.

    Retired roles stay readable for historical providers but cannot be given
    to new providers.
    """

    __tablename__ = "provider_roles"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the role."""

    uuid: Mapped[str] = mapped_column(
        String(UUID_LENGTH), unique=True, default=lambda: str(uuid_lib.uuid4())
    )
    """Globally unique identifier, stable across systems."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), unique=True)
    """Display name of the role (e.g. "Nurse")."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional description of the role."""

    retired: Mapped[bool] = mapped_column(default=False)
    """Soft retire flag."""

    retired_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the role was retired (if applicable)."""

    retire_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Reason given when retiring."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the role was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the role was last updated."""

    # Relationships
    relationship_types: Mapped[Set[RelationshipType]] = relationship(
        secondary=provider_role_relationship_types,
        lazy="selectin",
    )
    """Provider/patient relationship types holders of this role may take part in."""

    supervisee_roles: Mapped[Set["ProviderRole"]] = relationship(
        "ProviderRole",
        secondary=provider_role_supervisee_roles,
        primaryjoin=lambda: ProviderRole.id == provider_role_supervisee_roles.c.provider_role_id,
        secondaryjoin=lambda: ProviderRole.id == provider_role_supervisee_roles.c.supervisee_provider_role_id,
    )
    """Roles that holders of this role may supervise (direct edges only)."""

    def supports_relationship_type(self, relationship_type: RelationshipType) -> bool:
        """Check whether this role declares the given relationship type."""
        return any(rt.id == relationship_type.id for rt in self.relationship_types)

    def can_supervise_role(self, role: "ProviderRole") -> bool:
        """Check whether this role lists the given role as a supervisee."""
        return any(r.id == role.id for r in self.supervisee_roles)

    def __repr__(self) -> str:
        return f"<ProviderRole(id={self.id}, name={self.name!r}, retired={self.retired})>"

    def __str__(self) -> str:
        return self.name
