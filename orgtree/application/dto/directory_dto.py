"""Directory-related data transfer objects.

This module defines DTOs returned by the directory administration
service for organizations, groups and reconciliation runs.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from orgtree.application.dto.base import BaseDTO
from orgtree.core.directory.paths import EntryPath, PathGrammar


@dataclass
class OrganizationDTO(BaseDTO):
    """An organization as seen by callers."""
    name: str
    dn: str
    branch: str
    parent: Optional[str] = None

    @classmethod
    def from_path(cls, grammar: PathGrammar, path: EntryPath) -> "OrganizationDTO":
        """Create a DTO from an organization path.

        Args:
            grammar: Path grammar of the directory
            path: Organization path

        Returns:
            OrganizationDTO instance
        """
        parent = grammar.parent_organization(path)
        return cls(
            name=path.name,
            dn=str(path),
            branch=path.branch.value,
            parent=parent.name if parent else None,
        )


@dataclass
class GroupDTO(BaseDTO):
    """A group and its owning organization."""
    name: str
    dn: str
    organization: str
    branch: str

    @classmethod
    def from_path(cls, grammar: PathGrammar, path: EntryPath) -> "GroupDTO":
        return cls(
            name=path.name,
            dn=str(path),
            organization=grammar.organization_of(path).name,
            branch=path.branch.value,
        )


@dataclass
class ReconcileResultDTO(BaseDTO):
    """Entries created by a reconciliation run."""
    dn: str
    created: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created)
