"""
Unit tests for database functionality.
"""

import pytest
from unittest.mock import MagicMock, patch

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from provider_management.core.database import create_tables, drop_tables, get_db_context
from provider_management.core.exceptions import ErrorKind, ProviderManagementError


class TestGetDbContext:
    """Test cases for the unit-of-work context manager."""

    @patch('provider_management.core.database.SessionLocal')
    def test_commits_and_closes_on_success(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with get_db_context() as db:
            assert db == mock_session

        mock_session.commit.assert_called_once()
        mock_session.rollback.assert_not_called()
        mock_session.close.assert_called_once()

    @patch('provider_management.core.database.SessionLocal')
    def test_rolls_back_on_unexpected_exception(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with pytest.raises(ValueError):
            with get_db_context():
                raise ValueError("Test exception")

        mock_session.commit.assert_not_called()
        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('provider_management.core.database.SessionLocal')
    def test_rolls_back_on_domain_error(self, mock_session_local):
        mock_session = MagicMock()
        mock_session_local.return_value = mock_session

        with pytest.raises(ProviderManagementError) as exc:
            with get_db_context():
                raise ProviderManagementError(ErrorKind.NOT_ASSIGNED, "not assigned")

        assert exc.value.kind is ErrorKind.NOT_ASSIGNED
        mock_session.commit.assert_not_called()
        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    @patch('provider_management.core.database.logger')
    @patch('provider_management.core.database.SessionLocal')
    def test_consistency_violation_is_logged_as_error(self, mock_session_local, mock_logger):
        mock_session_local.return_value = MagicMock()

        with pytest.raises(ProviderManagementError):
            with get_db_context():
                raise ProviderManagementError(ErrorKind.INTERNAL_CONSISTENCY_VIOLATION, "duplicate")

        mock_logger.error.assert_called_once()

    @patch('provider_management.core.database.logger')
    @patch('provider_management.core.database.SessionLocal')
    def test_user_facing_error_is_not_logged_as_error(self, mock_session_local, mock_logger):
        mock_session_local.return_value = MagicMock()

        with pytest.raises(ProviderManagementError):
            with get_db_context():
                raise ProviderManagementError(ErrorKind.ALREADY_ASSIGNED, "already assigned")

        mock_logger.error.assert_not_called()
        mock_logger.exception.assert_not_called()


class TestTableManagement:
    """Test cases for create_tables and drop_tables."""

    @patch('provider_management.core.database.Base')
    def test_create_tables_success(self, mock_base):
        mock_metadata = MagicMock()
        mock_base.metadata = mock_metadata

        create_tables()

        mock_metadata.create_all.assert_called_once()

    @patch('provider_management.core.database.Base')
    def test_create_tables_failure(self, mock_base):
        mock_metadata = MagicMock()
        mock_metadata.create_all.side_effect = SQLAlchemyError("Database error")
        mock_base.metadata = mock_metadata

        with pytest.raises(SQLAlchemyError):
            create_tables()

    @patch('provider_management.core.database.Base')
    def test_drop_tables_success(self, mock_base):
        mock_metadata = MagicMock()
        mock_base.metadata = mock_metadata

        drop_tables()

        mock_metadata.drop_all.assert_called_once()


class TestSqliteForeignKeys:
    """Foreign keys are switched on for every SQLite connection."""

    def test_pragma_is_enabled_on_connect(self):
        engine = create_engine("sqlite://", poolclass=StaticPool)
        try:
            with engine.connect() as conn:
                assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        finally:
            engine.dispose()
