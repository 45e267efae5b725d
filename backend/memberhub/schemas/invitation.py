"""Schemas for organization invitations."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from memberhub.core.datetime_utils import utc_now_naive
from memberhub.core.shared_models import InvitationOperation, InvitationStatus

DEFAULT_PAGE_LIMIT = 100


class InvitationCreate(BaseModel):
    """Schema for inserting an invitation row."""

    organization_id: int
    created_by: int
    intended_for: int
    status: InvitationStatus = InvitationStatus.PENDING
    expires_at: datetime


class Invitation(BaseModel):
    """Invitation entity."""

    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    created_by: int
    intended_for: int
    status: InvitationStatus
    expires_at: Optional[datetime] = None
    created_at: datetime
    modified_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_expired(self) -> bool:
        """True when the expiry is unset or already in the past."""
        return self.expires_at is None or self.expires_at < utc_now_naive()

    def is_acceptance_operation_valid(self, operation: Union[InvitationOperation, str]) -> bool:
        """Whether ``operation`` may be applied in the current status.

        Accept, reject and cancel are only valid while the invitation is pending.
        """
        try:
            InvitationOperation(operation)
        except ValueError:
            return False
        return self.status == InvitationStatus.PENDING


class InvitationView(BaseModel):
    """Invitation joined with the names of its organization, inviter and invitee."""

    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    organization_name: str
    inviter_id: int
    inviter_name: str
    invitee_id: int
    invitee_name: str
    status: InvitationStatus
    expires_at: Optional[datetime] = None
    created_at: datetime
    modified_at: datetime
    deleted_at: Optional[datetime] = None


class InvitationSearchQuery(BaseModel):
    """Parameters of a repository invitation search."""

    organization_id: int
    intended_for: Optional[int] = None
    statuses: list[str] = Field(default_factory=list)
    limit: int = Field(DEFAULT_PAGE_LIMIT, ge=0)
    offset: int = Field(0, ge=0)


class InvitationCreateRequest(BaseModel):
    """Request body for inviting a user into an organization."""

    target_email: str = Field(..., min_length=1)
    organization_id: int = Field(..., gt=0)


class InvitationActionRequest(BaseModel):
    """Request body for accepting, rejecting or cancelling an invitation."""

    invitation_id: int = Field(..., gt=0)


class InvitationSearchRequest(BaseModel):
    """Filters an admin can apply when searching an organization's invitations."""

    statuses: Optional[list[str]] = None
    target_email: Optional[str] = None
    limit: int = Field(DEFAULT_PAGE_LIMIT, ge=0)
    offset: int = Field(0, ge=0)

    @field_validator("statuses", mode="before")
    @classmethod
    def split_statuses(cls, v: Optional[Union[str, list[str]]]) -> Optional[list[str]]:
        """Accept statuses as a list, a comma-separated string, or a mix of both."""
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        return [part.strip() for item in v for part in item.split(",") if part.strip()]


class InvitationList(BaseModel):
    """Invitations addressed to the current user."""

    invitations: list[InvitationView]
    count: int
