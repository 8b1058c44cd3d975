"""Application Data Transfer Objects.

This module contains DTOs used for data transfer between layers
and for API and CLI output.
"""

from orgtree.application.dto.base import BaseDTO
from orgtree.application.dto.directory_dto import (
    GroupDTO,
    OrganizationDTO,
    ReconcileResultDTO
)

__all__ = [
    "BaseDTO",
    "GroupDTO",
    "OrganizationDTO",
    "ReconcileResultDTO",
]
