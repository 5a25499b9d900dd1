"""Behavioural interface every group registry offers."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from weighted_group.models.member import Address, Member
from weighted_group.models.notification import Notification


@runtime_checkable
class GroupRegistry(Protocol):
    """Query, admin transfer, and batch membership update."""

    def get_admin(self) -> Address:
        """Return the current admin."""

    def get_members(self) -> list[Member]:
        """Return all members in stored order."""

    def get_member(self, address: Address) -> Member:
        """Return the member with the given address."""

    def get_total_weight(self) -> int:
        """Return the total voting weight of the group."""

    def update_admin(self, caller: Address, new_admin: Address) -> list[Notification]:
        """Hand the admin role to another address (admin only)."""

    def update_members(
        self,
        caller: Address,
        upserts: Sequence[Member],
        removals: Sequence[Address],
    ) -> list[Notification]:
        """Add, re-weight and remove members in one atomic call (admin only)."""
