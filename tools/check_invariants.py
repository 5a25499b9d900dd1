#!/usr/bin/env python3
"""Registry invariant checks against the policy file and a stored snapshot."""

import json
import sys
from pathlib import Path

from weighted_group.models.member import MAX_WEIGHT
from weighted_group.persistence.state_store import StateStore
from weighted_group.policy.resolver import POLICY_FILENAME, RegistryPolicy
from weighted_group.registry.invariants import check_registry_invariants


ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = ROOT / "config"
DATA_DIR = ROOT / "data"


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_policy(config_dir: Path, errors: list[str]) -> RegistryPolicy:
    """Validate the raw policy document, then build the policy from it."""
    path = config_dir / POLICY_FILENAME
    if not path.exists():
        errors.append(f"missing policy file: {path}")
        return RegistryPolicy()

    raw = load_json(path)
    ceiling = raw.get("max_total_weight", MAX_WEIGHT)
    if isinstance(ceiling, int) and ceiling > MAX_WEIGHT:
        errors.append(f"max_total_weight {ceiling} exceeds u64 ceiling {MAX_WEIGHT}")
    try:
        return RegistryPolicy.from_dict(raw)
    except ValueError as e:
        errors.append(f"invalid policy: {e}")
        return RegistryPolicy()


def check(config_dir: Path = CONFIG_DIR, data_dir: Path = DATA_DIR) -> int:
    errors: list[str] = []
    policy = check_policy(config_dir, errors)

    store = StateStore(data_dir / policy.state_file)
    try:
        registry = store.load_registry()
    except ValueError as e:
        errors.append(f"unreadable snapshot: {e}")
        registry = None

    if registry is not None:
        errors.extend(check_registry_invariants(registry))
        if registry.max_total_weight > policy.max_total_weight:
            errors.append(
                f"snapshot ceiling {registry.max_total_weight} is above policy "
                f"ceiling {policy.max_total_weight}"
            )

    if errors:
        for error in errors:
            print(f"FAIL: {error}", file=sys.stderr)
        return 1

    if registry is None:
        print("Policy OK (no snapshot stored)")
    else:
        print(
            f"All invariants hold: {registry.member_count} members, "
            f"total weight {registry.get_total_weight()}"
        )
    return 0


if __name__ == "__main__":
    args = sys.argv[1:]
    config = Path(args[0]) if len(args) > 0 else CONFIG_DIR
    data = Path(args[1]) if len(args) > 1 else DATA_DIR
    raise SystemExit(check(config, data))
