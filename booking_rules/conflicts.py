"""Conflict detection between candidate time ranges and existing bookings.

Intervals are half-open: a booking ending at 10:00 does not clash with a
range starting at 10:00. Only Pending and Paid bookings occupy a calendar.
"""
from typing import Iterable, List, Optional, Sequence

from booking_rules import config
from booking_rules.logging_config import get_logger
from booking_rules.models import Booking, BookingStatus, Shift
from booking_rules.timeutils import DayLike, parse_calendar_day, parse_time_to_minutes

logger = get_logger(__name__)


def _active_on(commitments: Iterable[Booking], day) -> List[Booking]:
    return [
        booking for booking in commitments
        if booking.status in config.ACTIVE_BOOKING_STATUSES and booking.day == day
    ]


def find_conflicts(
    commitments: Iterable[Booking],
    day: DayLike,
    candidate_start: str,
    candidate_end: str
) -> List[Booking]:
    """
    Every active booking on ``day`` that overlaps the candidate range.

    Args:
        commitments: Bookings for the lawyer (any status, any date)
        day: Calendar day of the candidate range
        candidate_start: "HH:MM" or "HH:MM:SS"
        candidate_end: "HH:MM" or "HH:MM:SS"

    Returns:
        Overlapping bookings, in input order. A malformed candidate range
        overlaps nothing; bookings with unreadable times are skipped.
    """
    target_day = parse_calendar_day(day)
    start = parse_time_to_minutes(candidate_start)
    end = parse_time_to_minutes(candidate_end)
    if target_day is None or start is None or end is None:
        logger.warning(
            "conflicts.malformed_candidate",
            day=str(day),
            start=candidate_start,
            end=candidate_end
        )
        return []

    conflicts = []
    for booking in _active_on(commitments, target_day):
        booked_start, booked_end = booking.start_minutes, booking.end_minutes
        if booked_start is None or booked_end is None:
            logger.warning("conflicts.malformed_booking", booking_id=booking.booking_id)
            continue
        if booked_start < end and booked_end > start:
            conflicts.append(booking)
    return conflicts


def has_conflict(
    commitments: Iterable[Booking],
    day: DayLike,
    candidate_start: str,
    candidate_end: str
) -> bool:
    """True if any active booking on ``day`` overlaps the candidate range."""
    return bool(find_conflicts(commitments, day, candidate_start, candidate_end))


def booking_for_slot(
    bookings: Iterable[Booking],
    day: DayLike,
    slot_start: str
) -> Optional[Booking]:
    """Booking whose range covers the start of a calendar slot."""
    target_day = parse_calendar_day(day)
    start = parse_time_to_minutes(slot_start)
    if target_day is None or start is None:
        return None

    for booking in bookings:
        if booking.day != target_day:
            continue
        booked_start, booked_end = booking.start_minutes, booking.end_minutes
        if booked_start is None or booked_end is None:
            continue
        if booked_start <= start < booked_end:
            return booking
    return None


def day_status(
    bookings: Iterable[Booking],
    day: DayLike,
    include_pending: bool = True,
    include_paid: bool = True
) -> str:
    """
    Calendar indicator for a day: "both", "pending", "paid" or "none".

    The include flags mirror the status filter toggles on the lawyer calendar.
    """
    target_day = parse_calendar_day(day)
    if target_day is None:
        return "none"
    on_day = [booking for booking in bookings if booking.day == target_day]
    has_pending = include_pending and any(b.status == BookingStatus.PENDING for b in on_day)
    has_paid = include_paid and any(b.status == BookingStatus.PAID for b in on_day)

    if has_pending and has_paid:
        return "both"
    if has_pending:
        return "pending"
    if has_paid:
        return "paid"
    return "none"


def conflicting_shifts(
    shifts: Sequence[Shift],
    commitments: Iterable[Booking],
    day: DayLike
) -> List[str]:
    """Ids of shifts that overlap an active booking on ``day``."""
    commitments = list(commitments)
    return [
        shift.shift_id for shift in shifts
        if has_conflict(commitments, day, shift.start_time, shift.end_time)
    ]
