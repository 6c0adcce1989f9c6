"""
Domain errors raised by the provider management engine.

Every failure the engine reports is a ProviderManagementError tagged with an
ErrorKind. The kind is stable and enumerable so calling layers can present
targeted messages; the context carries the identifiers of the entities
involved.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Enumerates the failure kinds the engine can report."""

    INVALID_ARGUMENT = "invalid_argument"
    PERSON_IS_NOT_PROVIDER = "person_is_not_provider"
    INVALID_RELATIONSHIP_TYPE = "invalid_relationship_type"
    ROLE_DOES_NOT_SUPPORT_TYPE = "role_does_not_support_type"
    ALREADY_ASSIGNED = "already_assigned"
    NOT_ASSIGNED = "not_assigned"
    SAME_SOURCE_AND_DESTINATION = "same_source_and_destination"
    INVALID_SUPERVISOR = "invalid_supervisor"
    ROLE_IN_USE = "role_in_use"
    INTERNAL_CONSISTENCY_VIOLATION = "internal_consistency_violation"
    CONFIGURATION_ERROR = "configuration_error"

    @property
    def is_user_facing(self) -> bool:
        """False for invariant breaches that must surface as unexpected failures."""
        return self not in (ErrorKind.INTERNAL_CONSISTENCY_VIOLATION, ErrorKind.CONFIGURATION_ERROR)


class ProviderManagementError(Exception):
    """Exception raised when a provider management operation cannot proceed."""

    def __init__(self, kind: ErrorKind, message: str, **context: Any):
        self.kind = kind
        self.message = message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"ProviderManagementError(kind={self.kind.value!r}, message={self.message!r}, context={self.context!r})"


def invalid_argument(message: str, **context: Any) -> ProviderManagementError:
    return ProviderManagementError(ErrorKind.INVALID_ARGUMENT, message, **context)


def require(value: Optional[Any], name: str) -> Any:
    """
    Return value, raising INVALID_ARGUMENT if it is None.

    Args:
        value: The required argument
        name: Human readable argument name used in the message

    Returns:
        The value unchanged
    """
    if value is None:
        raise invalid_argument(f"{name} cannot be null", argument=name)
    return value
