"""Explicit caches for slot and shift catalogs.

Callers own their cache objects and pass them where needed; nothing here is
a module-level singleton, so two pages (or two tests) never share catalog
state by accident.
"""
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from booking_rules import config
from booking_rules.logging_config import get_logger
from booking_rules.models import Shift, Slot

logger = get_logger(__name__)


class SlotCatalogCache:
    """
    Free-slot catalogs keyed by lawyer and date, with TTL.

    Pattern: In-memory cache with TTL and explicit cleanup.
    """

    def __init__(
        self,
        ttl: float = config.SLOT_CACHE_TTL_SECONDS,
        max_size: int = config.SLOT_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            ttl: Time-to-live in seconds
            max_size: Maximum entries kept; oldest are evicted past this
            clock: Time source
        """
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self.cache: Dict[Tuple[str, str], Tuple[List[Slot], float]] = {}

    def _is_expired(self, timestamp: float) -> bool:
        return self._clock() - timestamp > self.ttl

    def get(self, lawyer_id: str, day: str) -> Optional[List[Slot]]:
        """
        Cached catalog for a lawyer and date.

        Returns:
            A copy of the cached slots, or None if not found or expired
        """
        entry = self.cache.get((lawyer_id, day))
        if entry is None:
            return None

        slots, timestamp = entry
        if self._is_expired(timestamp):
            del self.cache[(lawyer_id, day)]
            return None

        return list(slots)

    def set(self, lawyer_id: str, day: str, slots: List[Slot]) -> None:
        self.cache[(lawyer_id, day)] = (list(slots), self._clock())
        self._cleanup_if_needed()

    def _cleanup_if_needed(self) -> None:
        """Drop expired entries, then the oldest ones, once over max_size."""
        if len(self.cache) <= self.max_size:
            return
        self.cleanup_expired()
        if len(self.cache) > self.max_size:
            oldest = sorted(self.cache.items(), key=lambda item: item[1][1])
            for key, _ in oldest[:len(self.cache) - self.max_size]:
                del self.cache[key]

    def clear(self, lawyer_id: Optional[str] = None) -> None:
        """
        Clear cache entries.

        Args:
            lawyer_id: Drop only this lawyer's catalogs, or everything if None
        """
        if lawyer_id is None:
            self.cache.clear()
            return
        for key in [key for key in self.cache if key[0] == lawyer_id]:
            del self.cache[key]

    def cleanup_expired(self) -> int:
        """Remove all expired entries; returns how many were dropped."""
        expired_keys = [
            key for key, (_, timestamp) in self.cache.items()
            if self._is_expired(timestamp)
        ]
        for key in expired_keys:
            del self.cache[key]
        return len(expired_keys)


class ShiftCatalog:
    """
    The account service's shift list, fetched at most once per owner.

    A failed load leaves the catalog empty so the next fetch_if_empty()
    tries again.
    """

    def __init__(self):
        self._shifts: List[Shift] = []
        self._lock = threading.Lock()

    @property
    def shifts(self) -> List[Shift]:
        return list(self._shifts)

    def is_empty(self) -> bool:
        return not self._shifts

    def fetch_if_empty(self, loader: Callable[[], List[Shift]]) -> List[Shift]:
        """
        Load shifts with ``loader`` unless already loaded.

        Args:
            loader: Callable returning the shift list (usually client.get_shifts)

        Returns:
            The cached shifts (possibly empty if loading failed)
        """
        with self._lock:
            if self._shifts:
                return list(self._shifts)
            try:
                self._shifts = list(loader())
            except Exception as exc:
                logger.error("shifts.fetch_failed", error=str(exc))
                self._shifts = []
            else:
                logger.info("shifts.fetched", count=len(self._shifts))
            return list(self._shifts)

    def clear(self) -> None:
        with self._lock:
            self._shifts = []
