"""Client for the portal's booking and account REST services.

Every call goes through one shared session and circuit breaker. Transport
and HTTP failures surface as ``ApiError``; an open circuit surfaces as
``CircuitBreakerOpen`` without touching the network.
"""
from typing import Any, Iterable, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from booking_rules import config
from booking_rules.circuit_breaker import CircuitBreaker
from booking_rules.http_client import create_http_session
from booking_rules.logging_config import get_logger
from booking_rules.models import (
    Booking,
    BookingCreate,
    BookingUpdate,
    DayOff,
    Shift,
    ShiftJustification,
    Slot
)
from booking_rules.slots import sort_slots
from booking_rules.timeutils import DayLike, format_date, parse_calendar_day

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """A backend call failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _day_param(day: DayLike) -> str:
    parsed = parse_calendar_day(day)
    if parsed is None:
        raise ValueError(f"Invalid date: {day!r}")
    return format_date(parsed)


class PortalApiClient:
    """Thin typed wrapper over the account and booking services."""

    def __init__(
        self,
        account_base_url: str = config.ACCOUNT_API_BASE_URL,
        booking_base_url: str = config.BOOKING_API_BASE_URL,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        breaker: Optional[CircuitBreaker] = None
    ):
        """
        Args:
            account_base_url: Base URL of the account service (shifts, day-offs)
            booking_base_url: Base URL of the booking service (slots, bookings)
            token: Bearer token sent on every call, if any
            session: Pre-configured session (defaults to create_http_session())
            breaker: Circuit breaker shared by all calls
        """
        self.account_base_url = account_base_url.rstrip("/")
        self.booking_base_url = booking_base_url.rstrip("/")
        self.token = token
        self.session = session or create_http_session()
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=config.CIRCUIT_FAILURE_THRESHOLD,
            timeout=config.CIRCUIT_TIMEOUT_SECONDS
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        senders = {
            "GET": self.session.get,
            "POST": self.session.post,
            "PUT": self.session.put,
            "DELETE": self.session.delete,
        }
        sender = senders.get(method.upper())
        if sender is None:
            raise ValueError(f"Unsupported HTTP method: {method}")

        headers = {**self._headers(), **kwargs.pop("headers", {})}

        def make_request():
            try:
                return sender(url, headers=headers, **kwargs)
            except requests.exceptions.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                raise ApiError(f"{method} {url} failed with {status}", status) from exc
            except requests.exceptions.RequestException as exc:
                raise ApiError(f"{method} {url} failed: {exc}") from exc

        logger.debug("api.request", method=method, url=url)
        return self.breaker.call(make_request)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Response body is not valid JSON: {exc}", response.status_code) from exc

    @classmethod
    def _json_list(cls, response: requests.Response) -> List[Any]:
        if response.status_code == 204 or not response.content:
            return []
        data = cls._json(response)
        return data if isinstance(data, list) else []

    @staticmethod
    def _parse_items(model: Type[ModelT], items: Iterable[Any]) -> List[ModelT]:
        """Validate each item; malformed items are logged and skipped."""
        parsed = []
        for item in items:
            try:
                parsed.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "api.item_skipped",
                    model=model.__name__,
                    errors=exc.error_count(),
                    item=repr(item)[:200]
                )
        return parsed

    # ------------------------------------------------------------------
    # Booking service
    # ------------------------------------------------------------------

    def get_free_slots(self, lawyer_id: str, day: DayLike) -> List[Slot]:
        """Free slots for a lawyer on a date, ordered by start time."""
        response = self._request(
            "GET",
            f"{self.booking_base_url}/api/Slot/free-slot",
            params={"lawyerId": lawyer_id, "date": _day_param(day)}
        )
        return sort_slots(self._parse_items(Slot, self._json_list(response)))

    def get_customer_bookings(self, customer_id: str, status: str) -> List[Booking]:
        response = self._request(
            "GET",
            f"{self.booking_base_url}/api/Booking",
            params={"customerId": customer_id, "status": status}
        )
        return self._parse_items(Booking, self._json_list(response))

    def get_lawyer_bookings(self, lawyer_id: str, status: str) -> List[Booking]:
        """All of a lawyer's bookings with ``status``; 204 means none."""
        response = self._request(
            "GET",
            f"{self.booking_base_url}/api/Booking/lawyer-all/{lawyer_id}",
            params={"status": status}
        )
        return self._parse_items(Booking, self._json_list(response))

    def get_booking(self, booking_id: str) -> Booking:
        response = self._request("GET", f"{self.booking_base_url}/api/Booking/{booking_id}")
        try:
            return Booking.model_validate(self._json(response))
        except ValidationError as exc:
            raise ApiError(f"Malformed booking {booking_id}: {exc.error_count()} errors") from exc

    def create_booking(self, booking: BookingCreate) -> Optional[str]:
        """
        Submit a new Pending booking for a consecutive slot selection.

        Attempted once, never retried.

        Returns:
            The new booking id, or None if the backend did not return one
        """
        response = self._request(
            "POST",
            f"{self.booking_base_url}/api/Booking",
            json=booking.model_dump(by_alias=True)
        )
        if not response.content:
            return None
        data = self._json(response)
        booking_id = data.get("bookingId") if isinstance(data, dict) else None
        return str(booking_id) if booking_id is not None else None

    def update_booking(self, booking_id: str, update: BookingUpdate) -> None:
        self._request(
            "PUT",
            f"{self.booking_base_url}/api/Booking/{booking_id}",
            json=update.model_dump(by_alias=True)
        )

    def cancel_booking(self, booking_id: str) -> None:
        """Cancel a booking. Attempted once, never retried."""
        self._request("DELETE", f"{self.booking_base_url}/api/Booking/{booking_id}")

    # ------------------------------------------------------------------
    # Account service
    # ------------------------------------------------------------------

    def get_shifts(self) -> List[Shift]:
        response = self._request("GET", f"{self.account_base_url}/api/shifts")
        return self._parse_items(Shift, self._json_list(response))

    def get_day_offs(self, from_date: DayLike, to_date: DayLike) -> List[DayOff]:
        response = self._request(
            "GET",
            f"{self.account_base_url}/api/day-off",
            params={"fromDate": _day_param(from_date), "toDate": _day_param(to_date)}
        )
        return self._parse_items(DayOff, self._json_list(response))

    def justify_day_off(
        self,
        day_off_id: str,
        justifications: Iterable[ShiftJustification]
    ) -> None:
        self._request(
            "PUT",
            f"{self.account_base_url}/api/day-off/justify/{day_off_id}",
            json=[item.model_dump(by_alias=True, mode="json") for item in justifications]
        )
