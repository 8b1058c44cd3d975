"""Directory layout: branch roots, reserved names and schema identifiers"""

from enum import Enum
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field

from orgtree.core.errors import ValidationError


class Branch(str, Enum):
    """Top-level partitions of the directory tree"""

    INTERNAL = "internal"
    EXTERNAL = "external"

    @classmethod
    def parse(cls, value: str) -> "Branch":
        """Parse a branch name, case-insensitively"""
        if value is not None:
            normalized = value.strip().lower()
            for branch in cls:
                if branch.value == normalized:
                    return branch
        raise ValidationError(
            [f"Invalid branch '{value}'. Must be 'internal' or 'external'"]
        )


class ObjectClasses(BaseModel):
    """Schema object classes used when creating and searching entries"""

    model_config = ConfigDict(frozen=True)

    organizational_unit: str = "organizationalUnit"
    group: str = "groupOfNames"


class DirectoryLayout(BaseModel):
    """Immutable description of how the tree is laid out.

    Every component that builds or reads paths receives one of these at
    construction instead of reaching for module-level constants.
    """

    model_config = ConfigDict(frozen=True)

    base_dn: str = Field(default="o=sreemat", description="Directory suffix")
    groups_container_name: str = Field(
        default="groups", description="Name of the container holding groups"
    )
    domain_admin_cn: str = Field(
        default="DomainAdministrator",
        description="Reserved administrator group of an organization",
    )
    group_admin_cn: str = Field(
        default="GroupAdministrator",
        description="Reserved administrator subgroup of a group",
    )
    super_admin_cn: str = Field(
        default="SuperAdministrators",
        description="Reserved super-administrator group of a branch",
    )
    object_classes: ObjectClasses = Field(default_factory=ObjectClasses)
    ou_attribute: str = "ou"
    cn_attribute: str = "cn"
    uid_attribute: str = "uid"
    member_attribute: str = "member"

    @property
    def reserved_group_names(self) -> FrozenSet[str]:
        """Lower-cased names never returned by group listings"""
        return frozenset(
            name.lower()
            for name in (self.domain_admin_cn, self.group_admin_cn, self.super_admin_cn)
        )

    def is_reserved_group_name(self, name: str) -> bool:
        return name.lower() in self.reserved_group_names
