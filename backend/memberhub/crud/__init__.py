"""CRUD operations for the application."""

from .crud_invitation import invitation
from .crud_invitation_query import invitation_query
from .crud_organization import organization
from .crud_organization_admin import organization_admin
from .crud_organization_member import organization_member
from .crud_user import user

__all__ = [
    "invitation",
    "invitation_query",
    "organization",
    "organization_admin",
    "organization_member",
    "user",
]
