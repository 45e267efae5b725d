"""Models for the application."""

from .invitation import Invitation
from .organization import Organization
from .organization_admin import OrganizationAdmin
from .organization_member import OrganizationMember
from .user import User

__all__ = [
    "Invitation",
    "Organization",
    "OrganizationAdmin",
    "OrganizationMember",
    "User",
]
