"""Tests for the registry service — typed results, persistence, event logging."""

from pathlib import Path

import pytest

from weighted_group.models.member import Address, Member
from weighted_group.persistence.event_log import EventKind, EventLog, EventRecord
from weighted_group.persistence.state_store import StateStore
from weighted_group.policy.resolver import RegistryPolicy
from weighted_group.registry.engine import MembershipRegistry
from weighted_group.service import RegistryService


ALICE = Address("alice")
BOB = Address("bob")
CAROL = Address("carol")


@pytest.fixture
def service() -> RegistryService:
    svc = RegistryService(RegistryPolicy())
    result = svc.create_registry(ALICE, [Member(ALICE, 1), Member(BOB, 1)])
    assert result.success
    return svc


def _durable_service(
    data_dir: Path, policy: RegistryPolicy = RegistryPolicy(),
) -> RegistryService:
    return RegistryService(
        policy,
        event_log=EventLog(storage_path=data_dir / "events.jsonl"),
        state_store=StateStore(storage_path=data_dir / "state.json"),
    )


class _FailingStore(StateStore):
    def save_registry(self, registry: MembershipRegistry) -> None:
        raise OSError("disk full")


class _FailingLog(EventLog):
    def append(self, event: EventRecord) -> None:
        raise OSError("read-only file system")


class TestCreate:
    def test_create_reports_state(self) -> None:
        svc = RegistryService(RegistryPolicy())
        result = svc.create_registry(ALICE, [Member(ALICE, 2), Member(BOB, 3)], admin=BOB)
        assert result.success
        assert result.data["admin"] == BOB
        assert result.data["total_weight"] == 5
        assert result.data["notifications"] == [
            {"kind": "member_added", "member": "alice"},
            {"kind": "member_added", "member": "bob"},
        ]

    def test_create_logs_events(self, service: RegistryService) -> None:
        kinds = [e.event_kind for e in service.event_log.events()]
        assert kinds == [
            EventKind.REGISTRY_CREATED,
            EventKind.MEMBER_ADDED,
            EventKind.MEMBER_ADDED,
        ]
        assert all(e.actor_id == ALICE for e in service.event_log.events())

    def test_create_twice_rejected(self, service: RegistryService) -> None:
        result = service.create_registry(ALICE, [Member(CAROL, 1)])
        assert not result.success
        assert result.data["error"] == "registry_exists"

    def test_create_empty_rejected(self) -> None:
        svc = RegistryService(RegistryPolicy())
        result = svc.create_registry(ALICE, [])
        assert not result.success
        assert result.data["error"] == "zero_members"
        assert svc.registry is None
        assert svc.event_log.count == 0

    def test_create_respects_policy_ceiling(self) -> None:
        svc = RegistryService(RegistryPolicy(max_total_weight=3))
        result = svc.create_registry(ALICE, [Member(ALICE, 2), Member(BOB, 2)])
        assert not result.success
        assert result.data["error"] == "weight_overflow"


class TestQueries:
    def test_queries(self, service: RegistryService) -> None:
        assert service.get_admin().data == {"admin": ALICE}
        assert service.get_total_weight().data == {"total_weight": 2}
        assert service.get_member(BOB).data == {"member": {"address": "bob", "weight": 1}}
        assert service.get_members().data["members"] == [
            {"address": "alice", "weight": 1},
            {"address": "bob", "weight": 1},
        ]

    def test_missing_member(self, service: RegistryService) -> None:
        result = service.get_member(CAROL)
        assert not result.success
        assert result.data["error"] == "no_member"

    def test_queries_before_create(self) -> None:
        svc = RegistryService(RegistryPolicy())
        result = svc.get_admin()
        assert not result.success
        assert result.data["error"] == "not_initialised"


class TestMutations:
    def test_update_members(self, service: RegistryService) -> None:
        result = service.update_members(ALICE, [Member(CAROL, 4)], [BOB])
        assert result.success
        assert result.data["total_weight"] == 5
        assert result.data["notifications"] == [
            {"kind": "member_added", "member": "carol"},
            {"kind": "member_removed", "member": "bob"},
        ]
        assert service.event_log.last_event.event_kind == EventKind.MEMBER_REMOVED

    def test_unauthorized_update_logs_nothing(self, service: RegistryService) -> None:
        before = service.event_log.count
        result = service.update_members(BOB, [Member(CAROL, 4)], [])
        assert not result.success
        assert result.data["error"] == "unauthorized"
        assert service.event_log.count == before
        assert service.get_total_weight().data["total_weight"] == 2

    def test_duplicate_upsert_reported(self, service: RegistryService) -> None:
        result = service.update_members(ALICE, [Member(BOB, 1), Member(BOB, 1)], [])
        assert not result.success
        assert result.data["error"] == "duplicate_member"
        assert "bob" in result.errors[0]

    def test_update_admin(self, service: RegistryService) -> None:
        result = service.update_admin(ALICE, BOB)
        assert result.success
        assert result.data["notifications"] == [
            {"kind": "admin_changed", "old_admin": "alice", "new_admin": "bob"},
        ]
        assert service.get_admin().data["admin"] == BOB
        assert service.event_log.events(EventKind.ADMIN_CHANGED)[0].actor_id == ALICE

    def test_status(self, service: RegistryService) -> None:
        status = service.status()
        assert status["initialised"] is True
        assert status["member_count"] == 2
        assert status["total_weight"] == 2
        assert status["invariant_violations"] == []
        assert status["events"] == 3
        assert status["persistence_degraded"] is False


class TestPersistence:
    def test_state_survives_restart(self, tmp_path: Path) -> None:
        svc = _durable_service(tmp_path)
        svc.create_registry(ALICE, [Member(ALICE, 1), Member(BOB, 1)])
        svc.update_members(ALICE, [Member(CAROL, 5)], [])

        restarted = _durable_service(tmp_path)
        assert restarted.get_total_weight().data["total_weight"] == 7
        assert restarted.get_admin().data["admin"] == ALICE
        assert restarted.event_log.count == 4

    def test_failed_write_rolls_back(self, tmp_path: Path) -> None:
        svc = RegistryService(RegistryPolicy())
        svc.create_registry(ALICE, [Member(ALICE, 1)])
        svc._state_store = _FailingStore(tmp_path / "state.json")
        events_before = svc.event_log.count

        result = svc.update_members(ALICE, [Member(BOB, 9)], [])
        assert not result.success
        assert result.data["error"] == "persistence"
        assert "disk full" in result.errors[0]
        assert svc.get_total_weight().data["total_weight"] == 1
        assert svc.event_log.count == events_before

    def test_failed_create_write_leaves_no_registry(self, tmp_path: Path) -> None:
        svc = RegistryService(RegistryPolicy(), state_store=_FailingStore(tmp_path / "s.json"))
        result = svc.create_registry(ALICE, [Member(ALICE, 1)])
        assert not result.success
        assert svc.registry is None

    def test_failed_event_write_marks_degraded(self, tmp_path: Path) -> None:
        svc = RegistryService(
            RegistryPolicy(),
            event_log=_FailingLog(),
            state_store=StateStore(storage_path=tmp_path / "state.json"),
        )
        result = svc.create_registry(ALICE, [Member(ALICE, 1)])
        assert result.success
        assert "read-only file system" in result.data["warnings"][0]
        assert svc.status()["persistence_degraded"] is True

        # The snapshot was committed before the event write failed.
        restarted = _durable_service(tmp_path)
        assert restarted.get_admin().data["admin"] == ALICE

    def test_degraded_mutation_still_commits(self, tmp_path: Path) -> None:
        svc = RegistryService(
            RegistryPolicy(), state_store=StateStore(tmp_path / "state.json"),
        )
        svc.create_registry(ALICE, [Member(ALICE, 1)])
        assert svc.status()["persistence_degraded"] is False

        svc._event_log = _FailingLog()
        result = svc.update_members(ALICE, [Member(BOB, 2)], [])
        assert result.success
        assert result.data["warnings"]
        assert svc.get_total_weight().data["total_weight"] == 3
        assert svc.status()["persistence_degraded"] is True


class TestPolicyCeilingOnRestart:
    def test_lower_policy_ceiling_applies(self, tmp_path: Path) -> None:
        svc = _durable_service(tmp_path)
        svc.create_registry(ALICE, [Member(ALICE, 1), Member(BOB, 1)])

        restarted = _durable_service(tmp_path, RegistryPolicy(max_total_weight=10))
        assert restarted.status()["max_total_weight"] == 10
        result = restarted.update_members(ALICE, [Member(CAROL, 9)], [])
        assert not result.success
        assert result.data["error"] == "weight_overflow"
        assert restarted.get_total_weight().data["total_weight"] == 2

    def test_raised_policy_ceiling_applies(self, tmp_path: Path) -> None:
        svc = _durable_service(tmp_path, RegistryPolicy(max_total_weight=10))
        svc.create_registry(ALICE, [Member(ALICE, 1)])

        restarted = _durable_service(tmp_path, RegistryPolicy(max_total_weight=100))
        result = restarted.update_members(ALICE, [Member(BOB, 50)], [])
        assert result.success
        assert result.data["total_weight"] == 51

    def test_policy_ceiling_below_stored_total_rejected(self, tmp_path: Path) -> None:
        svc = _durable_service(tmp_path)
        svc.create_registry(ALICE, [Member(ALICE, 6), Member(BOB, 6)])

        with pytest.raises(ValueError, match="exceeds ceiling 10"):
            _durable_service(tmp_path, RegistryPolicy(max_total_weight=10))
