"""
Unified Cache Manager - Two Tiers

Tier 1: Data cache (5 min TTL)
  - (country, variable, years) -> raw indicator records
  - Matches the frontend's stale time so repeated renders don't refetch

Tier 2: Session cache (24 hour sliding TTL)
  - session id -> ChartState
  - Never expires early; losing a session loses the user's edits
"""

import math
import random
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from config import config


@dataclass
class CacheEntry:
    """Single cache entry with value and expiration."""
    value: Any
    expires_at: float
    created_at: float = field(default_factory=time.time)
    ttl: float = 0


class LRUCache:
    """
    LRU cache with TTL and optional early expiration.

    With early_expiry_beta > 0, an entry close to expiring is reported as a
    miss with rising probability (XFetch), so one caller refreshes it before
    everyone misses at once. Use 0 for state that must not vanish early.
    """

    def __init__(self, max_size: int = 5000, early_expiry_beta: float = 0.0, sliding: bool = False):
        """
        Args:
            max_size: Maximum number of entries
            early_expiry_beta: Early expiration factor (0 disables it)
            sliding: Extend an entry's TTL every time it is read
        """
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._max_size = max_size
        self._beta = early_expiry_beta
        self._sliding = sliding

    def get(self, key: str) -> Optional[Any]:
        """Get value if it exists and has not expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        now = time.time()
        if now > entry.expires_at:
            del self._cache[key]
            return None

        if self._beta > 0 and entry.ttl > 0:
            time_remaining = entry.expires_at - now
            window = self._beta * entry.ttl * 0.1
            if time_remaining < window * (-math.log(random.random() + 0.001)):
                return None

        if self._sliding and entry.ttl > 0:
            entry.expires_at = now + entry.ttl

        self._cache.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Set value with TTL in seconds, evicting least recently used entries."""
        if key in self._cache:
            del self._cache[key]
        while len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)

        self._cache[key] = CacheEntry(value=value, expires_at=time.time() + ttl, ttl=ttl)

    def delete(self, key: str) -> bool:
        """Delete key if exists."""
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> dict:
        """Get cache statistics."""
        now = time.time()
        valid = sum(1 for e in self._cache.values() if e.expires_at > now)
        return {
            'total_entries': len(self._cache),
            'valid_entries': valid,
            'expired_entries': len(self._cache) - valid,
            'max_size': self._max_size,
        }


class CacheManager:
    """
    Two-tier cache manager.

    Tiers:
    1. Data: (country, variable, years) -> raw indicator records
    2. Sessions: session id -> ChartState
    """

    def __init__(self, max_size: Optional[int] = None):
        max_size = max_size or config.max_cache_size
        self._data = LRUCache(max_size=max_size, early_expiry_beta=1.0)
        self._sessions = LRUCache(max_size=max_size, sliding=True)

    # =========================================================================
    # Tier 1: Data Cache
    # =========================================================================

    def get_data(self, country_code: str, variable_code: str, years: Iterable[int] = ()) -> Optional[List[dict]]:
        """Cached backend records for one country/variable pair, or None."""
        return self._data.get(self._data_key(country_code, variable_code, years))

    def set_data(self, country_code: str, variable_code: str, years: Iterable[int], records: List[dict]) -> None:
        self._data.set(self._data_key(country_code, variable_code, years), records, config.data_cache_ttl)

    def _data_key(self, country_code: str, variable_code: str, years: Iterable[int]) -> str:
        years_part = ','.join(str(y) for y in sorted(set(years or ()))) or 'all'
        return f"data:{country_code}:{variable_code}:{years_part}"

    # =========================================================================
    # Tier 2: Session Cache
    # =========================================================================

    def get_session(self, session_id: str) -> Optional[Any]:
        return self._sessions.get(f"session:{session_id}")

    def set_session(self, session_id: str, state: Any) -> None:
        self._sessions.set(f"session:{session_id}", state, config.session_ttl)

    def delete_session(self, session_id: str) -> bool:
        return self._sessions.delete(f"session:{session_id}")

    # =========================================================================
    # Utilities
    # =========================================================================

    def stats(self) -> dict:
        """Get cache statistics for all tiers."""
        return {
            'data': self._data.stats(),
            'sessions': self._sessions.stats(),
        }

    def clear_data(self) -> None:
        self._data.clear()

    def clear_all(self) -> None:
        """Clear all caches."""
        self._data.clear()
        self._sessions.clear()


# Global cache instance
cache_manager = CacheManager()
