"""Persistence — append-only event log and registry state snapshots."""

from weighted_group.persistence.event_log import EventKind, EventLog, EventRecord
from weighted_group.persistence.state_store import StateStore

__all__ = ["EventKind", "EventLog", "EventRecord", "StateStore"]
