# pyright: reportMissingTypeStubs=false
"""
Database configuration and session management.

This module sets up SQLAlchemy database connection, session management,
and the declarative Base shared by every provider management model.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from provider_management.core.config import DATABASE_URL
from provider_management.core.constants import DB_POOL_RECYCLE_SECONDS
from provider_management.core.exceptions import ProviderManagementError

logger = logging.getLogger(__name__)

# Create SQLAlchemy engine with optimized settings
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before use
    pool_recycle=DB_POOL_RECYCLE_SECONDS,
    echo=False,          # Disable SQL logging
    future=True,         # Use SQLAlchemy 2.0 style
)

# Create configured SessionLocal class
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Don't expire objects after commit
)

# Create Base class for declarative models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


@event.listens_for(Engine, "connect")  # type: ignore
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # type: ignore
    """
    Turn on foreign key enforcement for SQLite connections.

    SQLite ignores FOREIGN KEY clauses unless asked per connection. Role purging
    relies on the provider -> role RESTRICT constraint, so it must be enforced
    on every backend.
    """
    module_name = type(dbapi_connection).__module__
    if "sqlite" not in module_name:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# SQLAlchemy event listeners to automatically set created_at and updated_at
@event.listens_for(Base, "before_insert", propagate=True)  # type: ignore
def receive_before_insert(mapper, connection, target):  # type: ignore
    """Set created_at and updated_at on insert."""
    # Import here to avoid circular import
    from provider_management.utils.datetime_utils import local_now
    now = local_now()
    # Only set columns that are mapped (properties won't be in mapper.columns)
    for column_name in ("created_at", "updated_at"):
        if column_name in mapper.columns and getattr(target, column_name, None) is None:  # type: ignore
            setattr(target, column_name, now)


@event.listens_for(Base, "before_update", propagate=True)  # type: ignore
def receive_before_update(mapper, connection, target):  # type: ignore
    """Set updated_at on update."""
    from provider_management.utils.datetime_utils import local_now
    if "updated_at" in mapper.columns:  # type: ignore
        setattr(target, "updated_at", local_now())


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager providing one unit of work.

    Commits when the block exits normally and rolls back on any error, so a
    service call made inside the block is atomic with everything else done
    in it.

    Yields:
        Session: SQLAlchemy database session

    Example:
        ```python
        with get_db_context() as db:
            PatientAssignmentService.assign_patient_to_provider(db, patient, nurse, treats)
        ```
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except ProviderManagementError as e:
        # Domain rule violations are expected business outcomes
        db.rollback()
        if not e.kind.is_user_facing:
            logger.error(f"Unit of work aborted by consistency violation: {e}")
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"Database transaction failed: {e}")
        raise
    finally:
        db.close()


def create_tables() -> None:
    """
    Create all database tables defined in SQLAlchemy models.

    Safe to call multiple times - will not recreate existing tables.

    Note:
        In production, prefer using Alembic migrations instead of this function.
        This is primarily useful for testing or initial setup.
    """
    # Import models so every table is registered on Base.metadata
    import provider_management.models  # noqa: F401
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to create database tables: {e}")
        raise


def drop_tables() -> None:
    """
    Drop all database tables defined in SQLAlchemy models.

    WARNING: This will permanently delete all data in the tables!
    """
    import provider_management.models  # noqa: F401
    try:
        Base.metadata.drop_all(bind=engine)
        logger.info("Database tables dropped successfully")
    except SQLAlchemyError as e:
        logger.exception(f"Failed to drop database tables: {e}")
        raise
