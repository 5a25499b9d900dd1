"""Member model — an address carrying an integer voting weight.

Identity is the address alone. Two members with the same address are the
same member regardless of weight. Weight may be zero: a zero-weight member
is still part of the group, it just has no voting influence.

Weights are unsigned 64-bit integers. Anything outside [0, MAX_WEIGHT]
is rejected at construction time rather than wrapped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NewType


Address = NewType("Address", str)

# Unsigned 64-bit ceiling for a single weight and (by default) for the total.
MAX_WEIGHT = 2**64 - 1


def parse_address(raw: str) -> Address:
    """Normalise an address string. The content is otherwise opaque."""
    value = raw.strip() if isinstance(raw, str) else ""
    if not value:
        raise ValueError("Address cannot be empty")
    return Address(value)


@dataclass(frozen=True)
class Member:
    """A member of the group.

    address: Opaque account identifier (hashable, comparable).
    weight: Voting power. May be 0 — the member stays in the group but
        cannot influence a vote.
    """
    address: Address
    weight: int

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not self.address:
            raise ValueError("Member address cannot be empty")
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ValueError(
                f"Member weight must be an integer, got {type(self.weight).__name__}"
            )
        if self.weight < 0:
            raise ValueError(f"Member weight cannot be negative: {self.weight}")
        if self.weight > MAX_WEIGHT:
            raise ValueError(
                f"Member weight {self.weight} exceeds u64 ceiling {MAX_WEIGHT}"
            )

    def to_record(self) -> dict[str, Any]:
        return {"address": self.address, "weight": self.weight}

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> Member:
        return cls(address=Address(data["address"]), weight=data["weight"])


def parse_member(raw: str) -> Member:
    """Parse ``ADDRESS:WEIGHT`` (split on the last colon).

    Raises:
        ValueError: If the separator is missing or the weight is not an integer.
    """
    address, sep, weight = raw.rpartition(":")
    if not sep:
        raise ValueError(f"Expected ADDRESS:WEIGHT, got {raw!r}")
    try:
        value = int(weight)
    except ValueError:
        raise ValueError(f"Weight is not an integer in {raw!r}") from None
    return Member(address=parse_address(address), weight=value)
