"""
Provider role lifecycle service.

Covers reading, saving, retiring and purging provider roles. Retiring is the
normal way to take a role out of use; purging removes the node from the role
graph entirely and only succeeds when no Provider record references it.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from provider_management.core.exceptions import ErrorKind, ProviderManagementError, invalid_argument, require
from provider_management.models import ProviderRole, RelationshipType
from provider_management.utils import role_queries
from provider_management.utils.datetime_utils import local_now

logger = logging.getLogger(__name__)


class ProviderRoleService:
    """
    Service class for provider role operations.
    """

    @staticmethod
    def get_all_provider_roles(db: Session, include_retired: bool = False) -> List[ProviderRole]:
        """Get all provider roles ordered by name."""
        return role_queries.get_all_provider_roles(db, include_retired=include_retired)

    @staticmethod
    def get_provider_role(db: Session, role_id: int) -> Optional[ProviderRole]:
        """Get a provider role by id, retired or not. Returns None if missing."""
        return role_queries.get_provider_role(db, role_id)

    @staticmethod
    def get_provider_role_by_uuid(db: Session, uuid: str) -> Optional[ProviderRole]:
        """Get a provider role by UUID, retired or not. Returns None if missing."""
        return role_queries.get_provider_role_by_uuid(db, uuid)

    @staticmethod
    def get_provider_roles_by_relationship_type(
        db: Session,
        relationship_type: RelationshipType
    ) -> List[ProviderRole]:
        """
        Get non-retired roles that support a relationship type.

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If relationship_type is None
        """
        require(relationship_type, "Relationship type")
        return role_queries.get_provider_roles_by_relationship_type(db, relationship_type)

    @staticmethod
    def get_provider_roles_by_supervisee_role(db: Session, role: ProviderRole) -> List[ProviderRole]:
        """
        Get non-retired roles that may supervise a role.

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If role is None
        """
        require(role, "Provider role")
        return role_queries.get_provider_roles_by_supervisee_role(db, role)

    @staticmethod
    def save_provider_role(db: Session, role: ProviderRole, commit: bool = True) -> ProviderRole:
        """
        Create or update a provider role.

        Args:
            db: Database session
            role: Role to persist, new or already attached to the session
            commit: If False, leave committing to the caller

        Returns:
            The persisted role

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If role is None or has no name
        """
        require(role, "Provider role")
        if not role.name or not role.name.strip():
            raise invalid_argument("Provider role name cannot be empty", argument="name")

        db.add(role)
        try:
            db.flush()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Failed to save provider role {role.name!r}: {e}")
            raise invalid_argument(
                f"A provider role named {role.name!r} already exists", argument="name"
            ) from e

        if commit:
            db.commit()

        logger.info(f"Saved provider role {role.id} ({role.name})")
        return role

    @staticmethod
    def retire_provider_role(db: Session, role: ProviderRole, reason: str, commit: bool = True) -> ProviderRole:
        """
        Retire a provider role.

        Existing providers and relationships are untouched; the role can no
        longer be given to new providers.

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If role is None or reason is empty
        """
        require(role, "Provider role")
        if not reason or not reason.strip():
            raise invalid_argument("Reason for retiring a provider role cannot be empty", argument="reason")

        role.retired = True
        role.retired_at = local_now()
        role.retire_reason = reason
        db.flush()
        if commit:
            db.commit()

        logger.info(f"Retired provider role {role.id} ({role.name}): {reason}")
        return role

    @staticmethod
    def unretire_provider_role(db: Session, role: ProviderRole, commit: bool = True) -> ProviderRole:
        """Bring a retired provider role back into use."""
        require(role, "Provider role")

        role.retired = False
        role.retired_at = None
        role.retire_reason = None
        db.flush()
        if commit:
            db.commit()

        logger.info(f"Unretired provider role {role.id} ({role.name})")
        return role

    @staticmethod
    def purge_provider_role(db: Session, role: ProviderRole) -> None:
        """
        Permanently delete a provider role.

        Phase 1 removes the role from the supervisee set of every role that
        lists it, retired roles included. Phase 2 deletes the role itself. Both
        phases share one transaction: if a Provider record still references the
        role, the delete fails on the foreign key, everything is rolled back
        and the graph is left exactly as it was.

        Args:
            db: Database session
            role: Role to purge

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): If role is None
            ProviderManagementError(ROLE_IN_USE): If any Provider record references the role
        """
        require(role, "Provider role")
        role_id = role.id
        role_name = role.name

        try:
            supervising_roles = role_queries.get_provider_roles_by_supervisee_role(
                db, role, include_retired=True
            )
            for supervising_role in supervising_roles:
                supervising_role.supervisee_roles = {
                    r for r in supervising_role.supervisee_roles if r.id != role_id
                }
            db.flush()
            logger.debug(f"Detached provider role {role_id} from {len(supervising_roles)} supervising roles")

            db.delete(role_queries.get_provider_role(db, role_id))
            db.flush()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Cannot purge provider role {role_id} ({role_name}): still referenced ({e})")
            raise ProviderManagementError(
                ErrorKind.ROLE_IN_USE,
                f"Cannot purge provider role {role_name} because it is in use",
                role_id=role_id,
            ) from e
        except Exception:
            db.rollback()
            raise

        db.commit()
        logger.info(f"Purged provider role {role_id} ({role_name})")
