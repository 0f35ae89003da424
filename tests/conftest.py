"""Shared test fixtures."""
from datetime import date
from unittest.mock import Mock

import pytest

from booking_rules.api_client import PortalApiClient
from booking_rules.models import Booking, DayOff, Slot


@pytest.fixture
def make_slot():
    """Build a Slot from short "HH:MM" times."""
    def _create(slot_id, start, end):
        return Slot(slotId=slot_id, slotStartTime=start, slotEndTime=end)
    return _create


@pytest.fixture
def morning_slots(make_slot):
    """Four one-hour slots 08:00-12:00, deliberately out of order."""
    return [
        make_slot("s3", "10:00:00", "11:00:00"),
        make_slot("s1", "08:00:00", "09:00:00"),
        make_slot("s4", "11:00:00", "12:00:00"),
        make_slot("s2", "09:00:00", "10:00:00"),
    ]


@pytest.fixture
def make_booking():
    def _create(booking_id, booking_date, start, end, status="Pending"):
        return Booking(
            bookingId=booking_id,
            bookingDate=booking_date,
            startTime=start,
            endTime=end,
            status=status
        )
    return _create


@pytest.fixture
def make_day_off():
    def _create(day_off_id, day, statuses):
        return DayOff.model_validate({
            "dayOffId": day_off_id,
            "lawyerName": "Jane Doe",
            "dayOff": day,
            "specificDayOffs": [
                {"shiftId": f"shift-{i}", "fromTime": "08:00:00", "toTime": "12:00:00", "status": status}
                for i, status in enumerate(statuses)
            ],
        })
    return _create


@pytest.fixture
def today():
    return date(2025, 1, 10)


@pytest.fixture
def mock_client():
    """PortalApiClient stand-in with every method mocked."""
    return Mock(spec=PortalApiClient)
