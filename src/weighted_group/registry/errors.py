"""Registry error kinds.

Caller mistakes (ZeroMembers, DuplicateMember, NoMember, Unauthorized,
WeightOverflow) are distinguished from InvariantViolated, which only
fires when the registry itself has reached a state no operation should
produce.
"""

from __future__ import annotations

from typing import Optional

from weighted_group.models.member import Address


class RegistryError(Exception):
    """Base class for every error the registry raises."""

    kind = "registry_error"


class ZeroMembers(RegistryError):
    """Raised when a member set would be empty."""

    kind = "zero_members"

    def __init__(self, detail: str = "no members entered") -> None:
        super().__init__(detail)


class DuplicateMember(RegistryError):
    """Raised when a batch names the same address more than once."""

    kind = "duplicate_member"

    def __init__(self, address: Address) -> None:
        super().__init__(f"entered duplicate member: {address}")
        self.address = address


class NoMember(RegistryError):
    """Raised when a lookup finds no member with the address."""

    kind = "no_member"

    def __init__(self, address: Address) -> None:
        super().__init__(f"member not found: {address}")
        self.address = address


class Unauthorized(RegistryError):
    """Raised when a privileged operation is called by a non-admin."""

    kind = "unauthorized"

    def __init__(self, caller: Optional[Address] = None) -> None:
        super().__init__(f"unauthorized caller: {caller}")
        self.caller = caller


class InvariantViolated(RegistryError):
    """Raised when registry state breaks an internal invariant."""

    kind = "invariant_violated"


class WeightOverflow(RegistryError):
    """Raised when the total weight would exceed its ceiling."""

    kind = "weight_overflow"

    def __init__(self, total: int, addend: int, ceiling: int) -> None:
        super().__init__(
            f"total weight {total} + {addend} exceeds ceiling {ceiling}"
        )
        self.total = total
        self.addend = addend
        self.ceiling = ceiling
