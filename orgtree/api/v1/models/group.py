"""Group API models"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GroupCreateRequest(BaseModel):
    """Request model for creating a group"""

    name: str = Field(..., min_length=1, max_length=128, description="Group name")
    organization: str = Field(
        ..., min_length=1, max_length=128, description="Owning organization name"
    )

    @field_validator("name", "organization")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class GroupResponse(BaseModel):
    """Response model for group"""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Group name")
    dn: str = Field(..., description="Distinguished name")
    organization: str = Field(..., description="Owning organization name")
    branch: str = Field(..., description="Branch the group lives in")
