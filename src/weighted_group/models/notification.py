"""Notifications — values describing what a registry mutation changed.

The registry never emits anything itself. Each mutating operation returns
the list of notifications it produced, in the order the changes were
applied, and the host decides where they go (event log, chain events,
nothing at all).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from weighted_group.models.member import Address


class NotificationKind(str, enum.Enum):
    """Kinds of change a registry can report."""
    MEMBER_ADDED = "member_added"
    MEMBER_UPDATED = "member_updated"
    MEMBER_REMOVED = "member_removed"
    ADMIN_CHANGED = "admin_changed"


@dataclass(frozen=True)
class Notification:
    """A single reported change.

    Member notifications carry ``member``; admin notifications carry
    ``old_admin`` and ``new_admin``.
    """
    kind: NotificationKind
    member: Optional[Address] = None
    old_admin: Optional[Address] = None
    new_admin: Optional[Address] = None

    @staticmethod
    def member_added(address: Address) -> Notification:
        return Notification(kind=NotificationKind.MEMBER_ADDED, member=address)

    @staticmethod
    def member_updated(address: Address) -> Notification:
        return Notification(kind=NotificationKind.MEMBER_UPDATED, member=address)

    @staticmethod
    def member_removed(address: Address) -> Notification:
        return Notification(kind=NotificationKind.MEMBER_REMOVED, member=address)

    @staticmethod
    def admin_changed(old_admin: Address, new_admin: Address) -> Notification:
        return Notification(
            kind=NotificationKind.ADMIN_CHANGED,
            old_admin=old_admin,
            new_admin=new_admin,
        )

    def payload(self) -> dict[str, Any]:
        """JSON-safe view used for event records and CLI output."""
        if self.kind == NotificationKind.ADMIN_CHANGED:
            return {
                "kind": self.kind.value,
                "old_admin": self.old_admin,
                "new_admin": self.new_admin,
            }
        return {"kind": self.kind.value, "member": self.member}
