"""Slot selection state for one booking transaction.

The booking, checkout and update-booking flows all run the same admission
rule (``slots.can_select``) but present a refusal differently: some refuse a
click with a message, others render the slot disabled and ignore clicks on
it. ``SelectionMode`` chooses between the two; the rule itself is identical.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from booking_rules.models import BookingStatus, Slot
from booking_rules.slots import can_select, selection_bounds, sort_slots
from booking_rules.timeutils import format_time

CONSECUTIVE_ONLY_MESSAGE = "Please select consecutive time slots only"
NO_SLOT_SELECTED_MESSAGE = "Please select at least one time slot"


def max_slots_message(max_count: int) -> str:
    return f"You can only select up to {max_count} slots for paid bookings"


def exact_slots_message(max_count: int) -> str:
    return f"You must select exactly {max_count} slots for paid bookings"


class SelectionMode(str, Enum):
    """How a refused slot is presented to the user."""
    REJECT_WITH_MESSAGE = "reject_with_message"
    DISABLE_SILENTLY = "disable_silently"


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of clicking a slot."""
    accepted: bool
    selected_ids: Tuple[str, ...]
    message: Optional[str] = None


class SlotSelection:
    """
    Selected slots for a single lawyer and date.

    Pattern: the catalog is replaced wholesale whenever the date or lawyer
    changes, and a new catalog always starts an empty selection.
    """

    def __init__(
        self,
        catalog: Iterable[Slot] = (),
        max_count: Optional[int] = None,
        mode: SelectionMode = SelectionMode.REJECT_WITH_MESSAGE
    ):
        """
        Args:
            catalog: Free slots for the chosen lawyer and date
            max_count: Cap for rescheduling a paid booking, None otherwise
            mode: Presentation of refused clicks
        """
        self.catalog: List[Slot] = sort_slots(catalog)
        self.max_count = max_count
        self.mode = mode
        self._selected: List[str] = []

    @property
    def selected_ids(self) -> Tuple[str, ...]:
        return tuple(self._selected)

    def replace_catalog(self, catalog: Iterable[Slot]) -> None:
        """Swap in a freshly fetched catalog and clear the selection."""
        self.catalog = sort_slots(catalog)
        self._selected = []

    def clear(self) -> None:
        self._selected = []

    def is_selectable(self, slot_id: str) -> bool:
        """Whether the slot button should be enabled."""
        return can_select(self.catalog, self._selected, slot_id, self.max_count)

    def selectable_ids(self) -> List[str]:
        """Ids of every enabled slot button, in catalog order."""
        return [slot.slot_id for slot in self.catalog if self.is_selectable(slot.slot_id)]

    def toggle(self, slot_id: str) -> ToggleResult:
        """
        Select or deselect a slot.

        Deselecting is always accepted. A refused selection leaves the state
        unchanged; in REJECT_WITH_MESSAGE mode it carries the reason.
        """
        if slot_id in self._selected:
            self._selected.remove(slot_id)
            return ToggleResult(True, self.selected_ids)

        if self.is_selectable(slot_id):
            self._selected.append(slot_id)
            return ToggleResult(True, self.selected_ids)

        if self.mode == SelectionMode.DISABLE_SILENTLY:
            return ToggleResult(False, self.selected_ids)

        return ToggleResult(False, self.selected_ids, self._refusal_message())

    def _refusal_message(self) -> str:
        if self.max_count is not None and len(self._selected) >= self.max_count:
            return max_slots_message(self.max_count)
        return CONSECUTIVE_ONLY_MESSAGE

    def time_range(self) -> str:
        """Human-readable span of the selection, e.g. "09:00 - 11:00"."""
        bounds = selection_bounds(self.catalog, self._selected)
        if bounds is None:
            return ""
        start, end = bounds
        return f"{format_time(start)} - {format_time(end)}"

    def total_price(self, price_per_hour: float) -> float:
        """Each slot is billed as one hour of the lawyer's rate."""
        return price_per_hour * len(self._selected)

    def validate_for_submit(self, status: Optional[str] = None) -> List[str]:
        """
        Check the selection before sending the booking request.

        Args:
            status: Status of the booking being updated, if any

        Returns:
            User-facing error messages; empty when the selection can be sent
        """
        errors = []
        if not self._selected:
            errors.append(NO_SLOT_SELECTED_MESSAGE)
        elif (
            status == BookingStatus.PAID
            and self.max_count is not None
            and len(self._selected) != self.max_count
        ):
            errors.append(exact_slots_message(self.max_count))
        return errors
