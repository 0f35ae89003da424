"""Slot catalog ordering, consecutiveness and admission rules.

A booking transaction reserves one unbroken chain of a lawyer's slots on a
single date. These functions are shared by the booking, checkout and
update-booking flows; all are pure and take the full catalog on every call.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from booking_rules.logging_config import get_logger
from booking_rules.models import Booking, BookingStatus, Slot
from booking_rules.timeutils import hours_between

logger = get_logger(__name__)


def _start_key(slot: Slot) -> Tuple[bool, int]:
    start = slot.start_minutes
    return (start is None, start if start is not None else 0)


def sort_slots(slots: Iterable[Slot]) -> List[Slot]:
    """
    Order a slot catalog by start time.

    Returns a new list; the input is not modified. Slots whose start time
    cannot be parsed are kept and placed last.
    """
    return sorted(slots, key=_start_key)


def index_slots(slots: Iterable[Slot]) -> Dict[str, Slot]:
    """Map slot id to slot."""
    return {slot.slot_id: slot for slot in slots}


def resolve_selection(
    all_slots: Sequence[Slot],
    selected_ids: Iterable[str]
) -> Tuple[List[Slot], List[str]]:
    """
    Resolve selected ids against the catalog.

    Returns:
        Tuple of (resolved slots sorted by start, ids missing from the catalog)
    """
    catalog = index_slots(all_slots)
    resolved = []
    missing = []
    for slot_id in dict.fromkeys(selected_ids):
        slot = catalog.get(slot_id)
        if slot is None:
            missing.append(slot_id)
        else:
            resolved.append(slot)
    return sort_slots(resolved), missing


def is_consecutive(all_slots: Sequence[Slot], selected_ids: Iterable[str]) -> bool:
    """
    Check that the selected slots form one unbroken chain.

    Each slot's end must equal the next slot's start once the selection is
    ordered by start time. Zero or one selected ids are trivially consecutive.
    An id missing from the catalog (stale selection after a refresh) or a slot
    with unreadable times makes the selection non-consecutive.

    Args:
        all_slots: Current slot catalog for the lawyer and date
        selected_ids: Selected slot ids, in any order

    Returns:
        True if the selection chains end-to-start with no gap or overlap
    """
    unique_ids = list(dict.fromkeys(selected_ids))
    if len(unique_ids) <= 1:
        return True

    resolved, missing = resolve_selection(all_slots, unique_ids)
    if missing:
        logger.warning(
            "slots.unresolved_selection",
            missing_ids=missing,
            catalog_size=len(all_slots)
        )
        return False

    malformed = [slot.slot_id for slot in resolved if not slot.is_well_formed]
    if malformed:
        logger.warning("slots.malformed_times", slot_ids=malformed)
        return False

    for current, following in zip(resolved, resolved[1:]):
        if current.end_minutes != following.start_minutes:
            return False

    return True


def can_select(
    all_slots: Sequence[Slot],
    selected_ids: Sequence[str],
    candidate_id: str,
    max_count: Optional[int] = None
) -> bool:
    """
    Decide whether toggling ``candidate_id`` is allowed.

    Rules, in order:
        1. A candidate already selected can always be toggled off.
        2. A candidate missing from the catalog, or with unreadable times,
           is never admitted.
        3. With ``max_count`` set, a full selection admits nothing more (a
           cap of 0 admits nothing at all).
        4. With nothing selected, any slot starts a new chain.
        5. Otherwise the selection plus the candidate must stay consecutive.

    Args:
        all_slots: Current slot catalog
        selected_ids: Current selection
        candidate_id: Slot the user clicked or the button being rendered
        max_count: Optional cap (slot count of an already-paid booking)

    Returns:
        True if the candidate may be toggled
    """
    if candidate_id in selected_ids:
        return True

    candidate = index_slots(all_slots).get(candidate_id)
    if candidate is None or not candidate.is_well_formed:
        return False

    if max_count is not None and len(set(selected_ids)) >= max_count:
        return False

    if not selected_ids:
        return True

    return is_consecutive(all_slots, [*selected_ids, candidate_id])


def selection_bounds(
    all_slots: Sequence[Slot],
    selected_ids: Iterable[str]
) -> Optional[Tuple[str, str]]:
    """First start time and last end time of the resolved selection."""
    resolved, _ = resolve_selection(all_slots, selected_ids)
    if not resolved:
        return None
    return resolved[0].start_time, resolved[-1].end_time


def max_slots_for_booking(booking: Booking) -> Optional[int]:
    """
    Slot cap when rescheduling an existing booking.

    A paid booking keeps its length, so the new selection is capped at the
    number of one-hour slots it originally spanned. Other statuses are
    uncapped.
    """
    if booking.status != BookingStatus.PAID:
        return None
    return hours_between(booking.start_time, booking.end_time)
