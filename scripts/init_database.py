#!/usr/bin/env python3
"""
Database initialization script for the provider management engine.

This script:
1. Creates any missing tables (use Alembic for production schemas)
2. Seeds the supervisor relationship type under its well-known UUID
3. Optionally applies a role taxonomy JSON file
4. Verifies the engine context resolves

Usage:
    python scripts/init_database.py [--taxonomy roles.json]

Environment:
    - DATABASE_URL: Database connection string
    - SUPERVISOR_RELATIONSHIP_TYPE_UUID: UUID of the supervisor relationship type
    - Or uses .env file if available
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from provider_management.core.config import DATABASE_URL, LOG_LEVEL, SUPERVISOR_RELATIONSHIP_TYPE_UUID
from provider_management.core.constants import LOG_FORMAT
from provider_management.core.context import load_context
from provider_management.core.database import create_tables, get_db_context
from provider_management.core.exceptions import ProviderManagementError
from provider_management.services import RoleTaxonomyService, load_taxonomy_file
from provider_management.utils.relationship_queries import get_or_create_relationship_type


# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def init_database(taxonomy_path=None):
    """Create tables, seed the supervisor type and apply an optional taxonomy."""
    logger.info(f"Initializing provider management database at {DATABASE_URL}")

    create_tables()

    with get_db_context() as db:
        get_or_create_relationship_type(
            db,
            SUPERVISOR_RELATIONSHIP_TYPE_UUID,
            a_is_to_b="Supervisor",
            b_is_to_a="Supervisee",
            description="Supervisor to provider relationship",
        )

    if taxonomy_path:
        taxonomy = load_taxonomy_file(taxonomy_path)
        with get_db_context() as db:
            roles = RoleTaxonomyService.apply_taxonomy(db, taxonomy)
            logger.info(f"Provider roles: {', '.join(role.name for role in roles)}")

    with get_db_context() as db:
        context = load_context(db)
        logger.info(f"Supervisor relationship type id: {context.supervisor_relationship_type_id}")


def main():
    parser = argparse.ArgumentParser(description="Initialize the provider management database.")
    parser.add_argument("--taxonomy", help="Path to a role taxonomy JSON file to apply")
    args = parser.parse_args()

    try:
        init_database(args.taxonomy)
    except ProviderManagementError as e:
        logger.error(f"Initialization failed ({e.kind.value}): {e.message}")
        sys.exit(1)

    logger.info("Database initialization completed")


if __name__ == "__main__":
    main()
