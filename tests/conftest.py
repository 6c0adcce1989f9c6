"""
Test configuration and shared fixtures for the provider management test suite.

Every test gets its own in-memory SQLite database. Foreign keys are enforced
(see provider_management.core.database), so role purging behaves as it does
on PostgreSQL.
"""

import pytest
from typing import Generator
from types import SimpleNamespace

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from provider_management.core.config import SUPERVISOR_RELATIONSHIP_TYPE_UUID
from provider_management.core.context import ProviderManagementContext, load_context
from provider_management.core.database import Base
from provider_management.services.supervision_service import SupervisionService

# Import all models to ensure they're registered with SQLAlchemy before any relationships are resolved
import provider_management.models  # noqa: F401

from tests.utils import (
    create_patient,
    create_provider,
    create_relationship_type,
    create_role,
)


@pytest.fixture(scope="function")
def db_engine():
    """
    Create an in-memory database engine for one test.

    StaticPool keeps the single connection alive so the in-memory database
    survives across sessions of the same test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session configured like SessionLocal."""
    TestingSession = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture
def supervisor_type(db_session):
    """The supervisor relationship type under its configured UUID."""
    return create_relationship_type(
        db_session, "Supervisor", "Supervisee", uuid=SUPERVISOR_RELATIONSHIP_TYPE_UUID
    )


@pytest.fixture
def context(db_session, supervisor_type) -> ProviderManagementContext:
    return load_context(db_session)


@pytest.fixture
def supervision(context) -> SupervisionService:
    return SupervisionService(context)


@pytest.fixture
def clinic(db_session, supervisor_type):
    """
    A small clinic: Nurses treat patients and supervise Community Health
    Workers, who accompany patients.
    """
    treats = create_relationship_type(db_session, "Nurse", "Patient")
    accompanies = create_relationship_type(db_session, "Community Health Worker", "Patient")

    chw_role = create_role(db_session, "Community Health Worker", relationship_types=[accompanies])
    nurse_role = create_role(
        db_session, "Nurse", relationship_types=[treats], supervisee_roles=[chw_role]
    )

    return SimpleNamespace(
        treats=treats,
        accompanies=accompanies,
        supervisor_type=supervisor_type,
        nurse_role=nurse_role,
        chw_role=chw_role,
        nurse=create_provider(db_session, "Nurse Alice", nurse_role),
        other_nurse=create_provider(db_session, "Nurse Bob", nurse_role),
        chw=create_provider(db_session, "Worker Carol", chw_role),
        patient=create_patient(db_session, "Patient Dan"),
        other_patient=create_patient(db_session, "Patient Erin"),
    )
