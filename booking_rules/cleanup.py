"""Best-effort cleanup of lapsed pending bookings and day-off requests.

Each lapsed item gets exactly one backend call. Failures are recorded in a
``CleanupReport`` and logged; they never abort the sweep and are not retried
within the same run.
"""
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional

from booking_rules import config
from booking_rules.api_client import ApiError, PortalApiClient
from booking_rules.circuit_breaker import CircuitBreakerOpen
from booking_rules.expiry import (
    partition_expired,
    past_day_offs_awaiting_decision,
    rejection_justifications,
    resolve_today
)
from booking_rules.logging_config import generate_request_id, get_logger
from booking_rules.models import Booking, BookingStatus, DayOff
from booking_rules.timeutils import DayLike

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    """Aggregated outcome of one cleanup run."""
    attempted: int = 0
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    def summary(self) -> str:
        return f"{self.success_count} of {self.attempted} succeeded, {self.failure_count} failed"


@dataclass
class SweepResult:
    """Pending bookings after an expiry sweep."""
    valid: List[Booking] = field(default_factory=list)
    expired: List[Booking] = field(default_factory=list)
    report: CleanupReport = field(default_factory=CleanupReport)


def _attempt(report: CleanupReport, item_id: str, action: Callable[[], None], log) -> None:
    report.attempted += 1
    try:
        action()
    except (ApiError, CircuitBreakerOpen) as exc:
        report.failed[item_id] = str(exc)
        log.warning("cleanup.item_failed", item_id=item_id, error=str(exc))
    else:
        report.succeeded.append(item_id)


def cancel_expired_bookings(
    client: PortalApiClient,
    expired: Iterable[Booking]
) -> CleanupReport:
    """
    Submit one cancellation per expired booking.

    Args:
        client: Portal API client
        expired: Bookings classified as expired

    Returns:
        CleanupReport with succeeded ids and failed ids with their errors
    """
    log = logger.bind(run_id=generate_request_id(), task="cancel_expired_bookings")
    report = CleanupReport()

    for booking in expired:
        if not booking.booking_id:
            log.warning("cleanup.missing_booking_id", booking_date=booking.booking_date)
            continue
        _attempt(
            report,
            booking.booking_id,
            partial(client.cancel_booking, booking.booking_id),
            log
        )

    if report.attempted:
        log.info(
            "cleanup.bookings_cancelled",
            attempted=report.attempted,
            succeeded=report.success_count,
            failed=report.failure_count
        )
    return report


def sweep_pending_bookings(
    client: PortalApiClient,
    customer_id: str,
    today: Optional[DayLike] = None
) -> SweepResult:
    """
    Fetch a customer's pending bookings and cancel the lapsed ones.

    The valid bookings are returned regardless of how the cancellations went.
    A failed fetch yields an empty result.
    """
    try:
        pending = client.get_customer_bookings(customer_id, BookingStatus.PENDING.value)
    except (ApiError, CircuitBreakerOpen) as exc:
        logger.error("sweep.fetch_failed", customer_id=customer_id, error=str(exc))
        return SweepResult()

    partition = partition_expired(pending, today)
    report = cancel_expired_bookings(client, partition.expired)
    return SweepResult(valid=partition.valid, expired=partition.expired, report=report)


def reject_past_day_offs(
    client: PortalApiClient,
    day_offs: Iterable[DayOff],
    today: Optional[DayLike] = None
) -> CleanupReport:
    """Reject the still-waiting shifts of day-off requests whose date has passed."""
    log = logger.bind(run_id=generate_request_id(), task="reject_past_day_offs")
    report = CleanupReport()

    for day_off in past_day_offs_awaiting_decision(day_offs, today):
        justifications = rejection_justifications(day_off)
        log.info(
            "cleanup.auto_reject",
            day_off_id=day_off.day_off_id,
            lawyer_name=day_off.lawyer_name,
            day_off=day_off.day_off
        )
        _attempt(
            report,
            day_off.day_off_id,
            partial(client.justify_day_off, day_off.day_off_id, justifications),
            log
        )

    return report


def refresh_day_offs(
    client: PortalApiClient,
    today: Optional[DayLike] = None
) -> List[DayOff]:
    """
    Day-off requests from today to the lookahead horizon, after auto-rejection.

    Lapsed waiting requests are rejected first and the list is fetched again;
    if the refetch fails the first list is returned.
    """
    reference = resolve_today(today)
    until = reference + timedelta(days=config.DAY_OFF_LOOKAHEAD_DAYS)

    try:
        day_offs = client.get_day_offs(reference, until)
    except (ApiError, CircuitBreakerOpen) as exc:
        logger.error("day_offs.fetch_failed", error=str(exc))
        return []

    report = reject_past_day_offs(client, day_offs, reference)
    if not report.attempted:
        return day_offs

    try:
        return client.get_day_offs(reference, until)
    except (ApiError, CircuitBreakerOpen) as exc:
        logger.warning("day_offs.refresh_failed", error=str(exc))
        return day_offs


def run_in_background(
    func: Callable,
    *args,
    on_done: Optional[Callable] = None,
    **kwargs
) -> threading.Thread:
    """
    Run a cleanup function on a daemon thread without waiting for it.

    Args:
        func: Cleanup function (e.g. cancel_expired_bookings)
        on_done: Called with the function's result when it completes

    Returns:
        The started thread (join it in tests)
    """
    task = getattr(func, "__name__", str(func))

    def runner():
        try:
            result = func(*args, **kwargs)
        except Exception:
            logger.exception("cleanup.background_failed", task=task)
            return
        if on_done is None:
            return
        try:
            on_done(result)
        except Exception:
            logger.exception("cleanup.callback_failed", task=task)

    thread = threading.Thread(target=runner, daemon=True)
    thread.start()
    return thread
