"""Base DTO classes for the application layer."""

from abc import ABC
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class BaseDTO(ABC):
    """Abstract base class for DTOs with common functionality."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary representation.

        Returns:
            Dictionary representation of the DTO
        """
        return asdict(self)
