"""Weighted group — a weighted-membership registry controlled by one admin."""

from weighted_group.models.member import MAX_WEIGHT, Address, Member
from weighted_group.models.notification import Notification, NotificationKind
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

__version__ = "0.1.0"

__all__ = [
    "MAX_WEIGHT",
    "Address",
    "Member",
    "Notification",
    "NotificationKind",
    "MembershipRegistry",
    "RegistryError",
    "ZeroMembers",
    "DuplicateMember",
    "NoMember",
    "Unauthorized",
    "InvariantViolated",
    "WeightOverflow",
]
