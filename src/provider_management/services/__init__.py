"""
Services package for provider management business logic.

This package contains service classes that encapsulate the role
compatibility rules, the assignment engine and the role lifecycle.
"""

from .role_compatibility_service import RoleCompatibilityService
from .patient_assignment_service import PatientAssignmentService
from .supervision_service import SupervisionService
from .provider_role_service import ProviderRoleService
from .provider_service import ProviderService
from .role_taxonomy_service import RoleTaxonomyService, load_taxonomy_file

__all__ = [
    "RoleCompatibilityService",
    "PatientAssignmentService",
    "SupervisionService",
    "ProviderRoleService",
    "ProviderService",
    "RoleTaxonomyService",
    "load_taxonomy_file",
]
