"""Common API models and schemas"""

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar('T')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel):
    """Base response model with common fields"""

    success: bool = Field(default=True, description="Whether the request was successful")
    message: Optional[str] = Field(None, description="Optional message")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")


class DataResponse(BaseResponse, Generic[T]):
    """Response with data payload"""

    data: T = Field(..., description="Response data")


class ListResponse(BaseResponse, Generic[T]):
    """Response with list of items"""

    items: List[T] = Field(default_factory=list, description="List of items")
    total: int = Field(0, description="Total number of items")


class PrincipalRequest(BaseModel):
    """Request body naming a principal to add as admin or member"""

    uid: str = Field(..., min_length=1, max_length=256, description="Principal uid")


class ReconcileResponse(BaseModel):
    """Entries re-created by a reconciliation run"""

    dn: str = Field(..., description="Reconciled entry")
    created: List[str] = Field(default_factory=list, description="DNs created by this run")
