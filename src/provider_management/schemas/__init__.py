from .role_taxonomy import RoleDefinition, RoleTaxonomy

__all__ = ["RoleDefinition", "RoleTaxonomy"]
