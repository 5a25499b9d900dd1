"""Tests for member and notification models."""

import pytest

from weighted_group.models.member import (
    MAX_WEIGHT,
    Address,
    Member,
    parse_address,
    parse_member,
)
from weighted_group.models.notification import Notification, NotificationKind


class TestMember:
    def test_zero_weight_allowed(self) -> None:
        member = Member(Address("alice"), 0)
        assert member.weight == 0

    def test_max_weight_allowed(self) -> None:
        member = Member(Address("alice"), MAX_WEIGHT)
        assert member.weight == 2**64 - 1

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            Member(Address("alice"), -1)

    def test_weight_above_u64_rejected(self) -> None:
        with pytest.raises(ValueError, match="u64"):
            Member(Address("alice"), MAX_WEIGHT + 1)

    def test_bool_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="integer"):
            Member(Address("alice"), True)

    def test_float_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="integer"):
            Member(Address("alice"), 1.5)

    def test_empty_address_rejected(self) -> None:
        with pytest.raises(ValueError, match="address"):
            Member(Address(""), 1)

    def test_member_is_immutable(self) -> None:
        member = Member(Address("alice"), 1)
        with pytest.raises(AttributeError):
            member.weight = 2  # type: ignore[misc]

    def test_record_round_trip(self) -> None:
        member = Member(Address("alice"), 7)
        assert Member.from_record(member.to_record()) == member


class TestParsing:
    def test_parse_member(self) -> None:
        assert parse_member("alice:3") == Member(Address("alice"), 3)

    def test_parse_member_splits_on_last_colon(self) -> None:
        assert parse_member("chain:alice:3") == Member(Address("chain:alice"), 3)

    def test_parse_member_requires_separator(self) -> None:
        with pytest.raises(ValueError, match="ADDRESS:WEIGHT"):
            parse_member("alice")

    def test_parse_member_requires_integer_weight(self) -> None:
        with pytest.raises(ValueError, match="not an integer"):
            parse_member("alice:heavy")

    def test_parse_address_strips(self) -> None:
        assert parse_address("  bob ") == "bob"

    def test_parse_blank_address_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_address("   ")


class TestNotification:
    def test_member_payload(self) -> None:
        note = Notification.member_added(Address("alice"))
        assert note.kind == NotificationKind.MEMBER_ADDED
        assert note.payload() == {"kind": "member_added", "member": "alice"}

    def test_admin_payload(self) -> None:
        note = Notification.admin_changed(Address("alice"), Address("bob"))
        assert note.payload() == {
            "kind": "admin_changed",
            "old_admin": "alice",
            "new_admin": "bob",
        }
