"""Schemas for the organization admin and member join entities."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class OrganizationUserLink(BaseModel):
    """A user linked to an organization."""

    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    user_id: int
    created_at: datetime
    modified_at: datetime
    deleted_at: Optional[datetime] = None


class OrganizationMember(OrganizationUserLink):
    """Standing membership of a user in an organization."""

    pass


class OrganizationAdmin(OrganizationUserLink):
    """Admin role of a user over an organization."""

    pass
