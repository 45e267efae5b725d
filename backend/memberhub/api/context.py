"""Authorization context for API requests.

Combines the caller's identity, organization roles and a request-scoped logger into a
single injectable dependency.
"""

from typing import FrozenSet, Optional

from pydantic import BaseModel

from memberhub import schemas
from memberhub.core.logging import ContextualLogger


class ApiContext(BaseModel):
    """Per-request snapshot of who is calling and what they may manage.

    Built once per request by ``deps.get_context`` and never shared between requests.
    A context without a user is unauthenticated; privileged operations must reject it.
    """

    request_id: str

    user: Optional[schemas.User] = None
    member_organization_ids: FrozenSet[int] = frozenset()
    admin_organization_ids: FrozenSet[int] = frozenset()

    logger: ContextualLogger

    class Config:
        """Pydantic configuration."""

        arbitrary_types_allowed = True  # For ContextualLogger

    @property
    def is_authenticated(self) -> bool:
        """Whether the caller resolved to a local user."""
        return self.user is not None

    @property
    def user_id(self) -> Optional[int]:
        """User ID if available."""
        return self.user.id if self.user else None

    def is_member_of_organization(self, organization_id: int) -> bool:
        """Whether the caller is a member of the organization."""
        return organization_id in self.member_organization_ids

    def is_admin_of_organization(self, organization_id: int) -> bool:
        """Whether the caller administers the organization."""
        return organization_id in self.admin_organization_ids

    def __str__(self) -> str:
        """String representation for logging."""
        if self.user:
            return (
                f"ApiContext(request_id={self.request_id[:8]}..., user={self.user.id}, "
                f"admin_of={sorted(self.admin_organization_ids)})"
            )
        return f"ApiContext(request_id={self.request_id[:8]}..., unauthenticated)"

