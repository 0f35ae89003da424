"""Tests for pending-booking expiry and lapsed day-off detection."""
from datetime import date, datetime

from booking_rules.expiry import (
    partition_expired,
    past_day_offs_awaiting_decision,
    rejection_justifications,
    resolve_today
)
from booking_rules.models import ShiftStatus


class TestPartitionExpired:
    """Test splitting pending bookings by date."""

    def test_today_and_past_are_expired(self, make_booking, today):
        pending = [
            make_booking("past", "2025-01-09", "09:00", "10:00"),
            make_booking("today", "2025-01-10", "16:00", "17:00"),
            make_booking("future", "2025-01-11", "09:00", "10:00"),
        ]

        result = partition_expired(pending, today)

        assert [b.booking_id for b in result.expired] == ["past", "today"]
        assert [b.booking_id for b in result.valid] == ["future"]

    def test_time_of_day_is_ignored(self, make_booking):
        """A booking later today is still expired."""
        pending = [make_booking("b", "2025-01-10T23:00:00", "23:00", "23:59")]
        result = partition_expired(pending, datetime(2025, 1, 10, 6, 0))
        assert [b.booking_id for b in result.expired] == ["b"]

    def test_every_booking_lands_once_in_order(self, make_booking, today):
        pending = [
            make_booking("a", "2025-01-12", "09:00", "10:00"),
            make_booking("b", "2025-01-01", "09:00", "10:00"),
            make_booking("c", "2025-02-01", "09:00", "10:00"),
        ]
        result = partition_expired(pending, today)
        assert [b.booking_id for b in result.valid] == ["a", "c"]
        assert [b.booking_id for b in result.expired] == ["b"]

    def test_unreadable_date_stays_valid(self, make_booking, today):
        pending = [make_booking("x", "someday", "09:00", "10:00")]
        result = partition_expired(pending, today)
        assert result.expired == []
        assert [b.booking_id for b in result.valid] == ["x"]

    def test_empty_input(self, today):
        result = partition_expired([], today)
        assert result.valid == [] and result.expired == []

    def test_string_reference_day(self, make_booking):
        pending = [make_booking("a", "2025-01-10", "09:00", "10:00")]
        assert len(partition_expired(pending, "2025-01-09").valid) == 1

    def test_resolve_today_defaults_to_local_date(self):
        assert resolve_today(None) == date.today()


class TestLapsedDayOffs:
    """Test detection and rejection of day-offs nobody decided on."""

    def test_past_waiting_day_off_selected(self, make_day_off, today):
        day_offs = [
            make_day_off("past", "2025-01-08", ["WAITING"]),
            make_day_off("decided", "2025-01-08", ["APPROVED"]),
            make_day_off("future", "2025-01-20", ["WAITING"]),
            make_day_off("today", "2025-01-10", ["APPROVED", "WAITING"]),
        ]

        lapsed = past_day_offs_awaiting_decision(day_offs, today)

        assert [d.day_off_id for d in lapsed] == ["past", "today"]

    def test_rejection_keeps_decided_shifts(self, make_day_off):
        day_off = make_day_off("d1", "2025-01-08", ["WAITING", "APPROVED", "REJECTED"])

        justifications = rejection_justifications(day_off)

        assert [j.status for j in justifications] == [
            ShiftStatus.REJECTED,
            ShiftStatus.APPROVED,
            ShiftStatus.REJECTED,
        ]
        assert [j.shift_id for j in justifications] == ["shift-0", "shift-1", "shift-2"]


class TestPartitionTotality:
    """Every pending booking lands in exactly one list."""

    def test_far_past_and_far_future(self, make_booking):
        pending = [
            make_booking("old", "2025-01-01", "09:00", "10:00"),
            make_booking("far", "2099-01-01", "09:00", "10:00"),
        ]

        result = partition_expired(pending, date(2025, 6, 1))

        assert [b.booking_id for b in result.expired] == ["old"]
        assert [b.booking_id for b in result.valid] == ["far"]

    def test_mixed_inputs_are_all_accounted_for(self, make_booking, today):
        pending = [
            make_booking("a", "2025-01-10", "09:00", "10:00"),
            make_booking("b", None, "09:00", "10:00"),
            make_booking("c", "2024-12-31T23:59:59", None, None),
            make_booking("d", "2025-13-45", "09:00", "10:00"),
            make_booking("e", "2030-01-01", "09:00", "10:00"),
            make_booking("a", "2025-01-10", "09:00", "10:00"),
        ]

        result = partition_expired(pending, today)

        assert len(result.valid) + len(result.expired) == len(pending)
        ids = sorted(b.booking_id for b in result.valid + result.expired)
        assert ids == sorted(b.booking_id for b in pending)
