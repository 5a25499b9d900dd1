"""Weighted group CLI — command-line host for a membership registry.

Usage:
    python -m weighted_group.cli init --caller alice --member alice:1 --member bob:1
    python -m weighted_group.cli status
    python -m weighted_group.cli members
    python -m weighted_group.cli member bob
    python -m weighted_group.cli total-weight
    python -m weighted_group.cli update-admin --caller alice --new-admin bob
    python -m weighted_group.cli update-members --caller alice --upsert carol:2 --remove bob
    python -m weighted_group.cli check-invariants
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from weighted_group.models.member import parse_address, parse_member
from weighted_group.persistence.event_log import EventLog
from weighted_group.persistence.state_store import StateStore
from weighted_group.policy.resolver import RegistryPolicy
from weighted_group.registry.invariants import check_registry_invariants
from weighted_group.service import RegistryService, ServiceResult


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"
DEFAULT_DATA = Path(__file__).resolve().parents[2] / "data"


def _make_service(args: argparse.Namespace) -> RegistryService:
    """Create a RegistryService with durable persistence."""
    policy: RegistryPolicy = args.policy
    data_dir: Path = args.data
    data_dir.mkdir(parents=True, exist_ok=True)
    return RegistryService(
        policy,
        event_log=EventLog(storage_path=data_dir / policy.event_log_file),
        state_store=StateStore(storage_path=data_dir / policy.state_file),
    )


def _report(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_init(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.create_registry(
        caller=args.caller,
        initial_members=args.member or [],
        admin=args.admin,
    )
    return _report(result)


def cmd_status(args: argparse.Namespace) -> int:
    service = _make_service(args)
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_admin(args: argparse.Namespace) -> int:
    return _report(_make_service(args).get_admin())


def cmd_members(args: argparse.Namespace) -> int:
    return _report(_make_service(args).get_members())


def cmd_member(args: argparse.Namespace) -> int:
    return _report(_make_service(args).get_member(args.address))


def cmd_total_weight(args: argparse.Namespace) -> int:
    return _report(_make_service(args).get_total_weight())


def cmd_update_admin(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _report(service.update_admin(args.caller, args.new_admin))


def cmd_update_members(args: argparse.Namespace) -> int:
    service = _make_service(args)
    result = service.update_members(
        args.caller,
        upserts=args.upsert or [],
        removals=args.remove or [],
    )
    return _report(result)


def cmd_check_invariants(args: argparse.Namespace) -> int:
    """Check the persisted registry against its invariants."""
    service = _make_service(args)
    if service.registry is None:
        print("No registry stored", file=sys.stderr)
        return 1
    errors = check_registry_invariants(service.registry)
    if errors:
        for error in errors:
            print(f"FAIL: {error}", file=sys.stderr)
        return 1
    print("All registry invariants hold")
    return 0


def _member_arg(raw: str):
    try:
        return parse_member(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _address_arg(raw: str):
    try:
        return parse_address(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weighted-group",
        description="Weighted group — membership registry CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=DEFAULT_DATA,
        help="Path to data directory (default: data/)",
    )
    sub = parser.add_subparsers(dest="command")

    # init
    p_init = sub.add_parser("init", help="Create the registry")
    p_init.add_argument("--caller", required=True, type=_address_arg, help="Caller address")
    p_init.add_argument(
        "--member", action="append", type=_member_arg,
        help="Initial member as ADDRESS:WEIGHT (repeatable)",
    )
    p_init.add_argument("--admin", type=_address_arg, help="Admin address (default: caller)")

    # queries
    sub.add_parser("status", help="Show registry status")
    sub.add_parser("admin", help="Show the current admin")
    sub.add_parser("members", help="List all members")
    p_member = sub.add_parser("member", help="Show one member")
    p_member.add_argument("address", type=_address_arg, help="Member address")
    sub.add_parser("total-weight", help="Show the total weight")

    # update-admin
    p_admin = sub.add_parser("update-admin", help="Transfer the admin role")
    p_admin.add_argument("--caller", required=True, type=_address_arg, help="Caller address")
    p_admin.add_argument("--new-admin", required=True, type=_address_arg, help="New admin address")

    # update-members
    p_upd = sub.add_parser("update-members", help="Upsert then remove members")
    p_upd.add_argument("--caller", required=True, type=_address_arg, help="Caller address")
    p_upd.add_argument(
        "--upsert", action="append", type=_member_arg,
        help="Member to add or re-weight as ADDRESS:WEIGHT (repeatable)",
    )
    p_upd.add_argument(
        "--remove", action="append", type=_address_arg,
        help="Address to remove (repeatable)",
    )

    # check-invariants
    sub.add_parser("check-invariants", help="Check stored state against registry invariants")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        args.policy = RegistryPolicy.from_config_dir(args.config)
    except ValueError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1
    logging.basicConfig(level=args.policy.logging_level)

    commands = {
        "init": cmd_init,
        "status": cmd_status,
        "admin": cmd_admin,
        "members": cmd_members,
        "member": cmd_member,
        "total-weight": cmd_total_weight,
        "update-admin": cmd_update_admin,
        "update-members": cmd_update_members,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except ValueError as e:
        # Corrupt snapshot, event log, or a policy ceiling below the stored total.
        print(f"Failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
