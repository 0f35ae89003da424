"""Tests for fetch-and-degrade loaders."""
from unittest.mock import Mock

import requests

from booking_rules.api_client import ApiError, PortalApiClient
from booking_rules.cache import SlotCatalogCache
from booking_rules.catalog import load_free_slots, load_lawyer_commitments
from booking_rules.circuit_breaker import CircuitBreakerOpen


class TestLoadFreeSlots:
    """Test slot loading with cache and failure fallback."""

    def test_loads_and_caches(self, mock_client, morning_slots):
        mock_client.get_free_slots.return_value = morning_slots
        cache = SlotCatalogCache()

        first = load_free_slots(mock_client, "l1", "2025-01-10", cache)
        second = load_free_slots(mock_client, "l1", "2025-01-10T08:00:00", cache)

        assert first == second == morning_slots
        assert mock_client.get_free_slots.call_count == 1

    def test_api_error_returns_empty(self, mock_client):
        mock_client.get_free_slots.side_effect = ApiError("boom", 500)
        assert load_free_slots(mock_client, "l1", "2025-01-10") == []

    def test_open_circuit_returns_empty(self, mock_client):
        mock_client.get_free_slots.side_effect = CircuitBreakerOpen("portal-api", 30)
        assert load_free_slots(mock_client, "l1", "2025-01-10") == []

    def test_invalid_date_skips_fetch(self, mock_client):
        assert load_free_slots(mock_client, "l1", "whenever") == []
        mock_client.get_free_slots.assert_not_called()


class TestLoadLawyerCommitments:
    """Test merging active statuses."""

    def test_merges_pending_and_paid(self, mock_client, make_booking):
        pending = make_booking("p", "2025-01-10", "09:00", "10:00", status="Pending")
        paid = make_booking("q", "2025-01-10", "10:00", "11:00", status="Paid")
        mock_client.get_lawyer_bookings.side_effect = [[pending], [paid]]

        result = load_lawyer_commitments(mock_client, "l1")

        assert [b.booking_id for b in result] == ["p", "q"]

    def test_failed_status_skipped(self, mock_client, make_booking):
        paid = make_booking("q", "2025-01-10", "10:00", "11:00", status="Paid")
        mock_client.get_lawyer_bookings.side_effect = [ApiError("down"), [paid]]

        result = load_lawyer_commitments(mock_client, "l1")

        assert [b.booking_id for b in result] == ["q"]


class TestMalformedBackendData:
    """Loaders keep working when the backend sends bad data."""

    def setup_method(self):
        self.session = Mock()
        self.client = PortalApiClient("http://account.test", "http://booking.test", session=self.session)

    def test_bad_slot_item_does_not_empty_catalog(self):
        response = Mock(status_code=200, content=b"[...]")
        response.json.return_value = [
            {"slotId": None, "slotStartTime": "08:00:00", "slotEndTime": "09:00:00"},
            {"slotId": "ok", "slotStartTime": "09:00:00", "slotEndTime": "10:00:00"},
        ]
        self.session.get.return_value = response

        slots = load_free_slots(self.client, "l1", "2025-01-10")

        assert [s.slot_id for s in slots] == ["ok"]

    def test_non_json_body_degrades_to_empty(self):
        response = Mock(status_code=200, content=b"<html></html>")
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        self.session.get.return_value = response

        assert load_free_slots(self.client, "l1", "2025-01-10") == []
        assert load_lawyer_commitments(self.client, "l1") == []
