"""Registry core — membership state transitions, errors, and invariant checks."""

from weighted_group.registry.engine import MembershipRegistry
from weighted_group.registry.errors import (
    DuplicateMember,
    InvariantViolated,
    NoMember,
    RegistryError,
    Unauthorized,
    WeightOverflow,
    ZeroMembers,
)
from weighted_group.registry.interface import GroupRegistry
from weighted_group.registry.invariants import check_registry_invariants
from weighted_group.registry.uniqueness import (
    find_duplicate_member,
    validate_unique_members,
)

__all__ = [
    "MembershipRegistry",
    "GroupRegistry",
    "RegistryError",
    "ZeroMembers",
    "DuplicateMember",
    "NoMember",
    "Unauthorized",
    "InvariantViolated",
    "WeightOverflow",
    "check_registry_invariants",
    "find_duplicate_member",
    "validate_unique_members",
]
