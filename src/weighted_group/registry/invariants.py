"""Invariant checks over a registry's current state.

Returns a list of violations. Empty list means the state is one that
normal operations can reach. Member weights are range-checked by the
Member model itself, so only cross-member invariants are checked here.
"""

from __future__ import annotations

from weighted_group.registry.engine import MembershipRegistry


def check_registry_invariants(registry: MembershipRegistry) -> list[str]:
    errors: list[str] = []
    record = registry.to_record()
    members = record["members"]

    if not record["admin"]:
        errors.append("registry has no admin")
    if not members:
        errors.append("registry has no members")

    # Every repeated address is reported, not just the first.
    seen: set[str] = set()
    for entry in members:
        if entry["address"] in seen:
            errors.append(f"duplicate member address: {entry['address']}")
        seen.add(entry["address"])

    summed = sum(entry["weight"] for entry in members)
    total = record["total_weight"]
    if total != summed:
        errors.append(f"total weight {total} != sum of member weights {summed}")
    if total > record["max_total_weight"]:
        errors.append(
            f"total weight {total} exceeds ceiling {record['max_total_weight']}"
        )
    return errors
