"""
Engine context resolved once at startup.

The supervisor relationship type is looked up by its well-known UUID when the
application starts and handed to the services that need it. The context is
immutable; resolving it again simply produces an equal value.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from provider_management.core.config import SUPERVISOR_RELATIONSHIP_TYPE_UUID
from provider_management.core.exceptions import ErrorKind, ProviderManagementError
from provider_management.models import RelationshipType
from provider_management.utils.relationship_queries import get_relationship_type_by_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderManagementContext:
    """Values the engine resolves once per process."""

    supervisor_relationship_type_id: int
    supervisor_relationship_type_uuid: str


def load_context(db: Session, supervisor_type_uuid: Optional[str] = None) -> ProviderManagementContext:
    """
    Resolve the engine context from the database.

    Args:
        db: Database session
        supervisor_type_uuid: UUID of the supervisor relationship type; defaults
            to SUPERVISOR_RELATIONSHIP_TYPE_UUID from configuration

    Returns:
        ProviderManagementContext

    Raises:
        ProviderManagementError(CONFIGURATION_ERROR): If the relationship type does not exist
    """
    type_uuid = supervisor_type_uuid or SUPERVISOR_RELATIONSHIP_TYPE_UUID
    relationship_type = get_relationship_type_by_uuid(db, type_uuid)
    if relationship_type is None:
        logger.error(f"Supervisor relationship type {type_uuid} does not exist in relationship type table")
        raise ProviderManagementError(
            ErrorKind.CONFIGURATION_ERROR,
            "Supervisor relationship type does not exist in relationship type table",
            relationship_type_uuid=type_uuid,
        )

    logger.info(f"Resolved supervisor relationship type {relationship_type} (id={relationship_type.id})")
    return ProviderManagementContext(
        supervisor_relationship_type_id=relationship_type.id,
        supervisor_relationship_type_uuid=relationship_type.uuid,
    )


def get_supervisor_relationship_type(db: Session, context: ProviderManagementContext) -> RelationshipType:
    """Load the supervisor RelationshipType object referenced by a context."""
    relationship_type = db.get(RelationshipType, context.supervisor_relationship_type_id)
    if relationship_type is None:
        raise ProviderManagementError(
            ErrorKind.CONFIGURATION_ERROR,
            "Supervisor relationship type no longer exists",
            relationship_type_id=context.supervisor_relationship_type_id,
        )
    return relationship_type
