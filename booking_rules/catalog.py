"""Fetch-and-degrade loaders feeding the rules engine.

A page must keep rendering when a backend call fails, so these loaders log
the failure and return an empty list instead of raising.
"""
from typing import List, Optional

from booking_rules import config
from booking_rules.api_client import ApiError, PortalApiClient
from booking_rules.cache import SlotCatalogCache
from booking_rules.circuit_breaker import CircuitBreakerOpen
from booking_rules.logging_config import get_logger
from booking_rules.models import Booking, Slot
from booking_rules.timeutils import DayLike, format_date, parse_calendar_day

logger = get_logger(__name__)


def load_free_slots(
    client: PortalApiClient,
    lawyer_id: str,
    day: DayLike,
    cache: Optional[SlotCatalogCache] = None
) -> List[Slot]:
    """
    Sorted free slots for a lawyer on a date.

    Args:
        client: Portal API client
        lawyer_id: Lawyer whose calendar is shown
        day: Selected date
        cache: Optional catalog cache consulted before the API

    Returns:
        Slots ordered by start time; empty if the date is invalid or the
        fetch failed
    """
    parsed = parse_calendar_day(day)
    if parsed is None:
        logger.warning("slots.invalid_date", lawyer_id=lawyer_id, day=str(day))
        return []
    day_key = format_date(parsed)

    if cache is not None:
        cached = cache.get(lawyer_id, day_key)
        if cached is not None:
            return cached

    try:
        slots = client.get_free_slots(lawyer_id, parsed)
    except (ApiError, CircuitBreakerOpen) as exc:
        logger.error("slots.fetch_failed", lawyer_id=lawyer_id, day=day_key, error=str(exc))
        return []

    if cache is not None:
        cache.set(lawyer_id, day_key, slots)
    return slots


def load_lawyer_commitments(client: PortalApiClient, lawyer_id: str) -> List[Booking]:
    """
    Every active booking of a lawyer.

    Each active status is fetched separately; a status whose fetch fails is
    logged and skipped so the others still show.
    """
    commitments: List[Booking] = []
    for status in config.ACTIVE_BOOKING_STATUSES:
        try:
            commitments.extend(client.get_lawyer_bookings(lawyer_id, status))
        except (ApiError, CircuitBreakerOpen) as exc:
            logger.error(
                "bookings.fetch_failed",
                lawyer_id=lawyer_id,
                status=status,
                error=str(exc)
            )
    return commitments
