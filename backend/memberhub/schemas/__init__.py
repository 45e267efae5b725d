# flake8: noqa: F401
"""Schemas for the application."""

from .invitation import (
    Invitation,
    InvitationActionRequest,
    InvitationCreate,
    InvitationCreateRequest,
    InvitationList,
    InvitationSearchQuery,
    InvitationSearchRequest,
    InvitationView,
)
from .organization import Organization, OrganizationBase, OrganizationCreate
from .organization_member import OrganizationAdmin, OrganizationMember
from .user import User, UserBase, UserCreate
