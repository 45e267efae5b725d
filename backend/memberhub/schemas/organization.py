"""Organization schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class OrganizationBase(BaseModel):
    """Organization base schema."""

    name: str = Field(..., max_length=255, description="Organization name")
    description: str = Field(..., description="Organization description")


class OrganizationCreate(OrganizationBase):
    """Organization creation schema, also the request body of the create endpoint."""

    pass


class Organization(OrganizationBase):
    """Organization schema."""

    model_config = {"from_attributes": True}

    id: int
    is_active: bool = True
    created_by: int
    created_at: datetime
    modified_at: datetime
    deleted_at: Optional[datetime] = None
