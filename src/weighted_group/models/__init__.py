"""Core data models for the weighted group registry."""

from weighted_group.models.member import (
    MAX_WEIGHT,
    Address,
    Member,
    parse_address,
    parse_member,
)
from weighted_group.models.notification import Notification, NotificationKind

__all__ = [
    "MAX_WEIGHT",
    "Address",
    "Member",
    "parse_address",
    "parse_member",
    "Notification",
    "NotificationKind",
]
