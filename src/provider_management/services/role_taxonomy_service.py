"""
Role taxonomy service.

Applies a role taxonomy document to the database: roles are upserted by name,
then relationship types and supervision edges are set. Edges are resolved
only after every role of the document exists, so a document may describe
supervision cycles.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from provider_management.core.exceptions import invalid_argument
from provider_management.models import ProviderRole, RelationshipType
from provider_management.schemas.role_taxonomy import RoleTaxonomy
from provider_management.utils import role_queries
from provider_management.utils.relationship_queries import get_relationship_type_by_uuid

logger = logging.getLogger(__name__)


def load_taxonomy_file(path: Union[str, Path]) -> RoleTaxonomy:
    """
    Read and validate a role taxonomy JSON file.

    Args:
        path: Path to the JSON document

    Returns:
        Validated RoleTaxonomy

    Raises:
        ProviderManagementError(INVALID_ARGUMENT): If the file is not valid JSON
            or does not match the schema
    """
    taxonomy_path = Path(path)
    try:
        data = json.loads(taxonomy_path.read_text(encoding="utf-8"))
        return RoleTaxonomy.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid role taxonomy file {taxonomy_path}: {e}")
        raise invalid_argument(f"Invalid role taxonomy file {taxonomy_path}: {e}", path=str(taxonomy_path)) from e


class RoleTaxonomyService:
    """
    Service class for applying role taxonomies.
    """

    @staticmethod
    def apply_taxonomy(db: Session, taxonomy: RoleTaxonomy) -> List[ProviderRole]:
        """
        Create or update the roles described by a taxonomy.

        Roles already present are matched by name and have their description,
        relationship types and supervisee roles replaced by the document's.
        Roles not mentioned in the document are left alone. Applying the same
        document twice is a no-op. Nothing is committed unless the whole
        document applies.

        Args:
            db: Database session
            taxonomy: Validated taxonomy document

        Returns:
            The roles of the document, in document order

        Raises:
            ProviderManagementError(INVALID_ARGUMENT): On an unknown relationship
                type UUID or supervisee role name
        """
        try:
            roles = RoleTaxonomyService._apply(db, taxonomy)
        except Exception:
            db.rollback()
            raise

        db.commit()
        logger.info(f"Applied role taxonomy with {len(roles)} roles")
        return roles

    @staticmethod
    def _apply(db: Session, taxonomy: RoleTaxonomy) -> List[ProviderRole]:
        roles_by_name: Dict[str, ProviderRole] = {}

        # Pass 1: roles and their relationship types
        for definition in taxonomy.roles:
            role = role_queries.get_provider_role_by_name(db, definition.name)
            if role is None:
                role = ProviderRole(name=definition.name)
                db.add(role)
                logger.info(f"Creating provider role {definition.name}")
            role.description = definition.description
            role.relationship_types = {
                RoleTaxonomyService._resolve_relationship_type(db, type_uuid, definition.name)
                for type_uuid in definition.relationship_type_uuids
            }
            roles_by_name[definition.name] = role
        db.flush()

        # Pass 2: supervision edges, now that every role exists
        for definition in taxonomy.roles:
            supervisees = set()
            for supervisee_name in definition.supervisee_roles:
                supervisee = roles_by_name.get(supervisee_name) or role_queries.get_provider_role_by_name(
                    db, supervisee_name
                )
                if supervisee is None:
                    raise invalid_argument(
                        f"Role {definition.name} lists unknown supervisee role {supervisee_name}",
                        role_name=definition.name,
                        supervisee_role_name=supervisee_name,
                    )
                supervisees.add(supervisee)
            roles_by_name[definition.name].supervisee_roles = supervisees
        db.flush()

        return [roles_by_name[definition.name] for definition in taxonomy.roles]

    @staticmethod
    def _resolve_relationship_type(db: Session, type_uuid: str, role_name: str) -> RelationshipType:
        relationship_type = get_relationship_type_by_uuid(db, type_uuid)
        if relationship_type is None:
            raise invalid_argument(
                f"Role {role_name} lists unknown relationship type {type_uuid}",
                role_name=role_name,
                relationship_type_uuid=type_uuid,
            )
        return relationship_type
