"""Expiry rules for pending bookings and day-off requests.

Pure classification only; the cancellation and rejection calls that follow
live in ``booking_rules.cleanup``.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from booking_rules.logging_config import get_logger
from booking_rules.models import Booking, DayOff, ShiftJustification, ShiftStatus
from booking_rules.timeutils import DayLike, parse_calendar_day

logger = get_logger(__name__)


@dataclass
class ExpiryPartition:
    """Pending bookings split by whether their date has passed."""
    valid: List[Booking] = field(default_factory=list)
    expired: List[Booking] = field(default_factory=list)


def resolve_today(today: Optional[DayLike]) -> date:
    resolved = parse_calendar_day(today) if today is not None else None
    if resolved is None:
        resolved = date.today()
    return resolved


def partition_expired(
    pending: Iterable[Booking],
    today: Optional[DayLike] = None
) -> ExpiryPartition:
    """
    Split pending bookings into valid and expired.

    A booking is expired when its date, as a calendar day, is on or before
    today. Every input lands in exactly one list, in input order. A booking
    whose date cannot be read is kept as valid so it is never cancelled on
    bad data.

    Args:
        pending: The customer's Pending bookings
        today: Reference day (defaults to the local date)

    Returns:
        ExpiryPartition with valid and expired bookings
    """
    reference = resolve_today(today)
    partition = ExpiryPartition()

    for booking in pending:
        day = booking.day
        if day is None:
            logger.warning(
                "expiry.unreadable_date",
                booking_id=booking.booking_id,
                booking_date=booking.booking_date
            )
            partition.valid.append(booking)
        elif day <= reference:
            partition.expired.append(booking)
        else:
            partition.valid.append(booking)

    return partition


def past_day_offs_awaiting_decision(
    day_offs: Iterable[DayOff],
    today: Optional[DayLike] = None
) -> List[DayOff]:
    """Day-off requests dated today or earlier that still have a WAITING shift."""
    reference = resolve_today(today)
    return [
        day_off for day_off in day_offs
        if day_off.day is not None
        and day_off.day <= reference
        and any(shift.status == ShiftStatus.WAITING for shift in day_off.specific_day_offs)
    ]


def rejection_justifications(day_off: DayOff) -> List[ShiftJustification]:
    """
    Full justification list for a lapsed day-off request.

    WAITING shifts become REJECTED; decided shifts keep their status so the
    backend always receives every shift of the request.
    """
    return [
        ShiftJustification(
            shift_id=shift.shift_id,
            status=ShiftStatus.REJECTED if shift.status == ShiftStatus.WAITING else shift.status
        )
        for shift in day_off.specific_day_offs
    ]
