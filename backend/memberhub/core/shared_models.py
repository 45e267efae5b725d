"""Shared models for the backend."""

from enum import Enum
from typing import Iterable


class InvitationStatus(str, Enum):
    """Invitation status enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @classmethod
    def all_values(cls) -> list[str]:
        """All known status values, in declaration order."""
        return [status.value for status in cls]

    @classmethod
    def are_all_valid(cls, statuses: Iterable[str]) -> bool:
        """Check a status filter.

        A filter is valid when it is non-empty, holds no more entries than there are
        statuses, and every entry is a known status value.
        """
        statuses = list(statuses)
        if not statuses or len(statuses) > len(cls):
            return False
        known = set(cls.all_values())
        return all(status in known for status in statuses)


class InvitationOperation(str, Enum):
    """Operations a user can apply to an invitation."""

    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
