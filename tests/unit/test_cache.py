"""Tests for slot catalog cache and shift catalog."""
from unittest.mock import Mock

from booking_rules.cache import ShiftCatalog, SlotCatalogCache
from booking_rules.models import Shift


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSlotCatalogCache:
    """Test TTL cache behaviour."""

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = SlotCatalogCache(ttl=300, clock=self.clock)

    def test_set_and_get(self, morning_slots):
        self.cache.set("l1", "2025-01-10", morning_slots)
        assert self.cache.get("l1", "2025-01-10") == morning_slots

    def test_get_returns_copy(self, morning_slots):
        self.cache.set("l1", "2025-01-10", morning_slots)
        self.cache.get("l1", "2025-01-10").clear()
        assert len(self.cache.get("l1", "2025-01-10")) == 4

    def test_miss(self):
        assert self.cache.get("l1", "2025-01-10") is None

    def test_expired_entry_dropped(self, morning_slots):
        self.cache.set("l1", "2025-01-10", morning_slots)
        self.clock.now += 301
        assert self.cache.get("l1", "2025-01-10") is None
        assert self.cache.cache == {}

    def test_clear_one_lawyer(self, morning_slots):
        self.cache.set("l1", "2025-01-10", morning_slots)
        self.cache.set("l2", "2025-01-10", morning_slots)

        self.cache.clear("l1")

        assert self.cache.get("l1", "2025-01-10") is None
        assert self.cache.get("l2", "2025-01-10") is not None

    def test_cleanup_expired(self, morning_slots):
        self.cache.set("l1", "2025-01-10", morning_slots)
        self.clock.now += 200
        self.cache.set("l2", "2025-01-10", morning_slots)
        self.clock.now += 200

        assert self.cache.cleanup_expired() == 1
        assert list(self.cache.cache) == [("l2", "2025-01-10")]


class TestShiftCatalog:
    """Test fetch-once shift loading."""

    def test_fetches_once(self):
        catalog = ShiftCatalog()
        loader = Mock(return_value=[Shift(shiftId="am", startTime="08:00", endTime="12:00")])

        catalog.fetch_if_empty(loader)
        shifts = catalog.fetch_if_empty(loader)

        assert loader.call_count == 1
        assert [s.shift_id for s in shifts] == ["am"]

    def test_failed_load_stays_empty_and_retries(self):
        catalog = ShiftCatalog()
        loader = Mock(side_effect=[RuntimeError("down"), [Shift(shiftId="pm")]])

        assert catalog.fetch_if_empty(loader) == []
        assert catalog.is_empty() is True
        assert len(catalog.fetch_if_empty(loader)) == 1

    def test_separate_catalogs_do_not_share_state(self):
        first, second = ShiftCatalog(), ShiftCatalog()
        first.fetch_if_empty(lambda: [Shift(shiftId="am")])
        assert second.is_empty() is True


class TestSlotCatalogCacheBound:
    """Test growth limits on insert."""

    def test_oldest_evicted_past_max_size(self, morning_slots):
        clock = FakeClock()
        cache = SlotCatalogCache(ttl=300, max_size=2, clock=clock)

        for day in ("2025-01-10", "2025-01-11", "2025-01-12"):
            cache.set("l1", day, morning_slots)
            clock.now += 1

        assert sorted(cache.cache) == [("l1", "2025-01-11"), ("l1", "2025-01-12")]

    def test_expired_pruned_before_evicting_fresh(self, morning_slots):
        clock = FakeClock()
        cache = SlotCatalogCache(ttl=10, max_size=2, clock=clock)
        cache.set("l1", "2025-01-10", morning_slots)
        clock.now += 5
        cache.set("l2", "2025-01-10", morning_slots)
        clock.now += 6

        cache.set("l3", "2025-01-10", morning_slots)

        assert sorted(cache.cache) == [("l2", "2025-01-10"), ("l3", "2025-01-10")]
