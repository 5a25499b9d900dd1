"""Registry service — host facade around the membership registry.

The registry core is pure: it computes the next state or raises. This
service plays the host collaborators around it:
- Caller identity: every privileged call names the caller explicitly.
- Persistence: committed state is written to the state store (if wired).
- Event sink: returned notifications are appended to the event log.

All operations produce typed results. A failed call leaves the registry
exactly as it was, including when the state store cannot be written.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from weighted_group.models.member import Address, Member
from weighted_group.models.notification import Notification
from weighted_group.persistence.event_log import EventKind, EventLog, EventRecord
from weighted_group.persistence.state_store import StateStore
from weighted_group.policy.resolver import RegistryPolicy
from weighted_group.registry.engine import MembershipRegistry
from weighted_group.registry.errors import RegistryError
from weighted_group.registry.interface import GroupRegistry
from weighted_group.registry.invariants import check_registry_invariants


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class RegistryService:
    """Unified facade for one deployed registry.

    Usage:
        policy = RegistryPolicy.from_config_dir(config_dir)
        service = RegistryService(policy)

        service.create_registry("alice", [Member("alice", 1), Member("bob", 1)])
        service.update_members("alice", [Member("carol", 2)], ["bob"])
        service.get_total_weight().data["total_weight"]  # 3

    Persistence (optional):
        service = RegistryService(policy, event_log=log, state_store=store)
        # State is persisted on each mutation and loaded on construction.
    """

    def __init__(
        self,
        policy: RegistryPolicy,
        event_log: Optional[EventLog] = None,
        state_store: Optional[StateStore] = None,
    ) -> None:
        self._policy = policy
        self._event_log = event_log if event_log is not None else EventLog()
        self._state_store = state_store
        self._persistence_degraded = False
        self._registry: Optional[MembershipRegistry] = None
        if state_store is not None:
            self._registry = state_store.load_registry()
            if self._registry is not None:
                # The policy ceiling wins over the one stored in the snapshot.
                if self._registry.max_total_weight != policy.max_total_weight:
                    logger.info(
                        "Applying policy ceiling %d (snapshot had %d)",
                        policy.max_total_weight, self._registry.max_total_weight,
                    )
                    self._registry.rebase_ceiling(policy.max_total_weight)
                logger.info(
                    "Restored registry from %s (%d members)",
                    state_store.storage_path, self._registry.member_count,
                )

    @property
    def registry(self) -> Optional[MembershipRegistry]:
        return self._registry

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def create_registry(
        self,
        caller: Address,
        initial_members: Sequence[Member],
        admin: Optional[Address] = None,
    ) -> ServiceResult:
        """Create the registry. Admin defaults to the caller."""
        if self._registry is not None:
            return ServiceResult(
                success=False,
                errors=["Registry already exists"],
                data={"error": "registry_exists"},
            )
        try:
            registry, notifications = MembershipRegistry.try_new(
                caller,
                initial_members,
                admin=admin,
                max_total_weight=self._policy.max_total_weight,
            )
        except RegistryError as e:
            return self._rejected("create_registry", caller, e)

        self._registry = registry

        def _rollback() -> None:
            self._registry = None

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err], data={"error": "persistence"})

        created = EventRecord.create(
            event_id=_new_event_id(),
            event_kind=EventKind.REGISTRY_CREATED,
            actor_id=caller,
            payload={
                "admin": registry.get_admin(),
                "total_weight": registry.get_total_weight(),
                "member_count": registry.member_count,
            },
        )
        warning = self._record(caller, notifications, leading=[created])
        logger.info(
            "Registry created by %s: admin=%s members=%d total_weight=%d",
            caller, registry.get_admin(), registry.member_count,
            registry.get_total_weight(),
        )
        return self._committed(notifications, warning, {
            "admin": registry.get_admin(),
            "member_count": registry.member_count,
            "total_weight": registry.get_total_weight(),
        })

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_admin(self) -> ServiceResult:
        return self._query(lambda r: {"admin": r.get_admin()})

    def get_members(self) -> ServiceResult:
        return self._query(lambda r: {
            "members": [m.to_record() for m in r.get_members()],
        })

    def get_member(self, address: Address) -> ServiceResult:
        return self._query(lambda r: {"member": r.get_member(address).to_record()})

    def get_total_weight(self) -> ServiceResult:
        return self._query(lambda r: {"total_weight": r.get_total_weight()})

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_admin(self, caller: Address, new_admin: Address) -> ServiceResult:
        """Transfer the admin role (current admin only)."""
        return self._mutate(
            "update_admin",
            caller,
            lambda r: r.update_admin(caller, new_admin),
        )

    def update_members(
        self,
        caller: Address,
        upserts: Sequence[Member],
        removals: Sequence[Address],
    ) -> ServiceResult:
        """Apply upserts then removals atomically (admin only)."""
        return self._mutate(
            "update_members",
            caller,
            lambda r: r.update_members(caller, upserts, removals),
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        """Return a summary of the registry and its collaborators."""
        registry = self._registry
        summary: dict[str, Any] = {
            "initialised": registry is not None,
            "events": self._event_log.count,
            "persistence_degraded": self._persistence_degraded,
        }
        if registry is not None:
            record = registry.to_record()
            summary.update({
                "admin": record["admin"],
                "member_count": registry.member_count,
                "total_weight": registry.get_total_weight(),
                "max_total_weight": registry.max_total_weight,
                "invariant_violations": check_registry_invariants(registry),
            })
        return summary

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _query(
        self, read: Callable[[GroupRegistry], dict[str, Any]]
    ) -> ServiceResult:
        if self._registry is None:
            return _not_initialised()
        try:
            return ServiceResult(success=True, data=read(self._registry))
        except RegistryError as e:
            return ServiceResult(success=False, errors=[str(e)], data={"error": e.kind})

    def _mutate(
        self,
        operation: str,
        caller: Address,
        apply: Callable[[GroupRegistry], list[Notification]],
    ) -> ServiceResult:
        registry = self._registry
        if registry is None:
            return _not_initialised()

        snapshot = registry.to_record()
        try:
            notifications = apply(registry)
        except RegistryError as e:
            return self._rejected(operation, caller, e)

        def _rollback() -> None:
            self._registry = MembershipRegistry.from_record(snapshot)

        err = self._safe_persist(on_rollback=_rollback)
        if err:
            return ServiceResult(success=False, errors=[err], data={"error": "persistence"})

        warning = self._record(caller, notifications)
        logger.info(
            "%s by %s committed: %d changes, total_weight=%d",
            operation, caller, len(notifications), registry.get_total_weight(),
        )
        return self._committed(notifications, warning, {
            "admin": registry.get_admin(),
            "member_count": registry.member_count,
            "total_weight": registry.get_total_weight(),
        })

    def _rejected(self, operation: str, caller: Address, error: RegistryError) -> ServiceResult:
        logger.warning("%s by %s rejected (%s): %s", operation, caller, error.kind, error)
        return ServiceResult(success=False, errors=[str(error)], data={"error": error.kind})

    def _committed(
        self,
        notifications: list[Notification],
        warning: Optional[str],
        data: dict[str, Any],
    ) -> ServiceResult:
        data["notifications"] = [n.payload() for n in notifications]
        if warning:
            data["warnings"] = [warning]
        return ServiceResult(success=True, data=data)

    def _record(
        self,
        caller: Address,
        notifications: list[Notification],
        leading: Optional[list[EventRecord]] = None,
    ) -> Optional[str]:
        """Append events for committed notifications.

        State is already persisted at this point, so a write failure does
        not roll anything back. It marks persistence as degraded instead.
        """
        records = list(leading or [])
        records.extend(
            EventRecord.create(
                event_id=_new_event_id(),
                event_kind=EventKind(n.kind.value),
                actor_id=caller,
                payload=n.payload(),
            )
            for n in notifications
        )
        try:
            for record in records:
                self._event_log.append(record)
        except OSError as e:
            self._persistence_degraded = True
            logger.error("Event log write failed: %s", e)
            return f"Event log degraded: {e}"
        return None

    def _safe_persist(
        self,
        on_rollback: Optional[Callable[[], None]] = None,
    ) -> Optional[str]:
        """Persist state with fail-closed error handling.

        On failure runs the rollback callback and returns an error string
        for the caller's ServiceResult. On success returns None.
        """
        if self._state_store is None or self._registry is None:
            return None
        try:
            self._state_store.save_registry(self._registry)
            return None
        except OSError as e:
            if on_rollback is not None:
                on_rollback()
            logger.error("State persistence failed, mutation rolled back: %s", e)
            return f"Persistence failure: {e}"


def _new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


def _not_initialised() -> ServiceResult:
    return ServiceResult(
        success=False,
        errors=["Registry has not been created"],
        data={"error": "not_initialised"},
    )
