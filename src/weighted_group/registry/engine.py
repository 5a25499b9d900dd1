"""Membership registry — admin, weighted members, and their running total.

A single admin maintains a set of members, each an address with an integer
voting weight. The registry keeps the total weight in lock-step with the
member set: it is maintained incrementally, never recomputed.

Architecture:
- MembershipRegistry is a pure state-transition object. It performs no I/O.
- Mutations return the notifications they produced; the host persists
  state and forwards notifications (see weighted_group.service).
- Authentication is the host's job. The registry only compares the caller
  address it is handed against the stored admin.

Invariants:
- Exactly one admin once constructed.
- Member addresses are pairwise distinct.
- total_weight == sum of member weights, and never exceeds the ceiling.
- The member set is never empty.

Batch update order: authorise, validate upserts, apply upserts in input
order, apply removals in input order. Removal runs strictly after all
upserts, so an address in both lists ends up removed. The batch is staged
and committed only if every step succeeds.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Optional, Sequence

from weighted_group.models.member import MAX_WEIGHT, Address, Member
from weighted_group.models.notification import Notification
from weighted_group.registry.errors import (
    InvariantViolated,
    NoMember,
    Unauthorized,
    WeightOverflow,
    ZeroMembers,
)
from weighted_group.registry.uniqueness import (
    find_duplicate_member,
    validate_unique_members,
)


def _validate_ceiling(max_total_weight: int) -> int:
    if isinstance(max_total_weight, bool) or not isinstance(max_total_weight, int):
        raise ValueError("max_total_weight must be an integer")
    if not 0 < max_total_weight <= MAX_WEIGHT:
        raise ValueError(
            f"max_total_weight must be in (0, {MAX_WEIGHT}], got {max_total_weight}"
        )
    return max_total_weight


def _position(members: Sequence[Member], address: Address) -> Optional[int]:
    for index, member in enumerate(members):
        if member.address == address:
            return index
    return None


class MembershipRegistry:
    """Weighted membership registry controlled by a single admin.

    Use ``try_new`` to construct a validated registry and ``from_record``
    to restore one from persistence. A bare ``MembershipRegistry()`` is
    an empty shell with no admin.
    """

    def __init__(self, max_total_weight: int = MAX_WEIGHT) -> None:
        self._max_total_weight = _validate_ceiling(max_total_weight)
        self._admin: Optional[Address] = None
        self._members: list[Member] = []
        self._total_weight = 0

    @classmethod
    def try_new(
        cls,
        caller: Address,
        initial_members: Sequence[Member],
        admin: Optional[Address] = None,
        max_total_weight: int = MAX_WEIGHT,
    ) -> tuple[MembershipRegistry, list[Notification]]:
        """Construct a registry from a non-empty, duplicate-free member list.

        Args:
            caller: Address of the account constructing the registry.
            initial_members: Members to store, in order.
            admin: Admin address; defaults to ``caller``.
            max_total_weight: Ceiling for the total weight.

        Returns:
            The registry and one MEMBER_ADDED notification per member,
            in input order.

        Raises:
            ZeroMembers: If ``initial_members`` is empty.
            DuplicateMember: If two entries share an address.
            WeightOverflow: If the summed weights exceed the ceiling.
        """
        registry = cls(max_total_weight)
        initial_members = list(initial_members)
        if not initial_members:
            raise ZeroMembers()
        validate_unique_members(initial_members)

        total = 0
        notifications: list[Notification] = []
        for member in initial_members:
            total = registry._checked_add(total, member.weight)
            notifications.append(Notification.member_added(member.address))

        registry._admin = admin if admin is not None else caller
        registry._members = initial_members
        registry._total_weight = total
        return registry, notifications

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_admin(self) -> Address:
        # An adminless registry can only come from a corrupt snapshot.
        if self._admin is None:
            raise InvariantViolated("registry has no admin")
        return self._admin

    def get_members(self) -> list[Member]:
        """Return all members in stored (insertion) order."""
        if not self._members:
            raise InvariantViolated("registry has no members")
        return list(self._members)

    def get_member(self, address: Address) -> Member:
        """Return the member with ``address``.

        Raises:
            NoMember: If no member has that address.
        """
        index = _position(self._members, address)
        if index is None:
            raise NoMember(address)
        return self._members[index]

    def get_total_weight(self) -> int:
        return self._total_weight

    @property
    def member_count(self) -> int:
        return len(self._members)

    @property
    def max_total_weight(self) -> int:
        return self._max_total_weight

    def rebase_ceiling(self, max_total_weight: int) -> None:
        """Replace the total-weight ceiling of a restored registry.

        Raises:
            ValueError: If the ceiling is out of range or below the current total.
        """
        _validate_ceiling(max_total_weight)
        if self._total_weight > max_total_weight:
            raise ValueError(
                f"total weight {self._total_weight} exceeds ceiling {max_total_weight}"
            )
        self._max_total_weight = max_total_weight

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_admin(self, caller: Address, new_admin: Address) -> list[Notification]:
        """Transfer the admin role. Transferring to the current admin is allowed.

        Raises:
            Unauthorized: If ``caller`` is not the current admin.
        """
        old_admin = self._authorise(caller)
        self._admin = new_admin
        return [Notification.admin_changed(old_admin, new_admin)]

    def update_members(
        self,
        caller: Address,
        upserts: Sequence[Member],
        removals: Sequence[Address],
    ) -> list[Notification]:
        """Apply a batch of upserts followed by a batch of removals.

        An upsert for an existing address replaces its weight; otherwise the
        member is appended. Removals of unknown addresses are silently
        ignored, as are repeated removals.

        Returns:
            Notifications in the order the changes were applied.

        Raises:
            Unauthorized: If ``caller`` is not the admin.
            DuplicateMember: If ``upserts`` names an address twice.
            WeightOverflow: If the total would exceed the ceiling.
            ZeroMembers: If the batch would remove every member.
        """
        self._authorise(caller)
        upserts = list(upserts)
        validate_unique_members(upserts)

        staged = list(self._members)
        total = self._total_weight
        notifications: list[Notification] = []

        for member in upserts:
            index = _position(staged, member.address)
            if index is not None:
                total = self._checked_sub(total, staged[index].weight)
                total = self._checked_add(total, member.weight)
                staged[index] = dataclasses.replace(staged[index], weight=member.weight)
                notifications.append(Notification.member_updated(member.address))
            else:
                total = self._checked_add(total, member.weight)
                staged.append(member)
                notifications.append(Notification.member_added(member.address))

        duplicate = find_duplicate_member(staged)
        if duplicate is not None:
            raise InvariantViolated(f"member list holds duplicate address {duplicate}")

        for address in removals:
            index = _position(staged, address)
            if index is None:
                continue
            total = self._checked_sub(total, staged[index].weight)
            removed = staged.pop(index)
            notifications.append(Notification.member_removed(removed.address))

        if not staged:
            raise ZeroMembers("update would remove every member")

        self._members = staged
        self._total_weight = total
        return notifications

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_record(self) -> dict[str, Any]:
        """Serialise registry state for persistence."""
        return {
            "admin": self._admin,
            "members": [m.to_record() for m in self._members],
            "total_weight": self._total_weight,
            "max_total_weight": self._max_total_weight,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> MembershipRegistry:
        """Restore state as stored. No invariant is re-checked here."""
        registry = cls(data.get("max_total_weight", MAX_WEIGHT))
        admin = data.get("admin")
        registry._admin = Address(admin) if admin else None
        registry._members = [Member.from_record(m) for m in data.get("members", [])]
        registry._total_weight = data.get("total_weight", 0)
        return registry

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _authorise(self, caller: Address) -> Address:
        admin = self.get_admin()
        if caller != admin:
            raise Unauthorized(caller)
        return admin

    def _checked_add(self, total: int, weight: int) -> int:
        if total + weight > self._max_total_weight:
            raise WeightOverflow(total, weight, self._max_total_weight)
        return total + weight

    @staticmethod
    def _checked_sub(total: int, weight: int) -> int:
        # A member's weight is part of the running total, so this only
        # fails when the bookkeeping itself is broken.
        if weight > total:
            raise InvariantViolated(
                f"total weight {total} is below member weight {weight}"
            )
        return total - weight
