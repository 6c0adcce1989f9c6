"""
Role taxonomy document schema.

A taxonomy lists provider roles by name, the relationship types (by UUID)
each role supports, and the names of the roles each role may supervise.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from provider_management.core.constants import MAX_STRING_LENGTH


class RoleDefinition(BaseModel):
    """Schema for one provider role in a taxonomy document."""
    name: str = Field(max_length=MAX_STRING_LENGTH, description="Unique role name, used to reference the role")
    description: Optional[str] = Field(default=None, description="Optional description of the role")
    relationship_type_uuids: List[str] = Field(
        default_factory=list,
        description="UUIDs of the provider/patient relationship types holders of this role may take part in"
    )
    supervisee_roles: List[str] = Field(
        default_factory=list,
        description="Names of roles holders of this role may supervise. Direct edges only."
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Role name cannot be empty')
        return v

    @field_validator('supervisee_roles')
    @classmethod
    def strip_supervisee_names(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v]


class RoleTaxonomy(BaseModel):
    """Schema for a full role taxonomy document."""
    roles: List[RoleDefinition] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_unique_names(self) -> 'RoleTaxonomy':
        seen = set()
        for role in self.roles:
            if role.name in seen:
                raise ValueError(f'Duplicate role name: {role.name}')
            seen.add(role.name)
        return self
