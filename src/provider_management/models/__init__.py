# Package initialization
# Import all models to ensure relationships are properly established
from .person import Person
from .patient import Patient
from .relationship_type import RelationshipType
from .provider_role import ProviderRole, provider_role_relationship_types, provider_role_supervisee_roles
from .provider import Provider
from .relationship import Relationship

__all__ = [
    "Person",
    "Patient",
    "RelationshipType",
    "ProviderRole",
    "provider_role_relationship_types",
    "provider_role_supervisee_roles",
    "Provider",
    "Relationship",
]
