"""Address uniqueness check for member batches.

The check is set based, so duplicates are caught wherever they sit in the
sequence. An adjacent-pair scan only works on address-sorted input and
misses duplicates in the insertion-ordered member list.
"""

from __future__ import annotations

from typing import Iterable, Optional

from weighted_group.models.member import Address, Member
from weighted_group.registry.errors import DuplicateMember


def find_duplicate_member(members: Iterable[Member]) -> Optional[Address]:
    """Return the first address seen twice (by increasing index), or None."""
    seen: set[Address] = set()
    for member in members:
        if member.address in seen:
            return member.address
        seen.add(member.address)
    return None


def validate_unique_members(members: Iterable[Member]) -> None:
    """Raise DuplicateMember for the first repeated address."""
    duplicate = find_duplicate_member(members)
    if duplicate is not None:
        raise DuplicateMember(duplicate)
