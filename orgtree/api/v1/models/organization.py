"""Organization API models"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrganizationCreateRequest(BaseModel):
    """Request model for creating an organization or sub-organization"""

    name: str = Field(..., min_length=1, max_length=128, description="Organization name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that are blank once trimmed"""
        if not v.strip():
            raise ValueError("Organization name must not be blank")
        return v.strip()


class OrganizationResponse(BaseModel):
    """Response model for organization"""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Organization name")
    dn: str = Field(..., description="Distinguished name")
    branch: str = Field(..., description="Branch the organization lives in")
    parent: Optional[str] = Field(None, description="Enclosing organization name")
