"""
Session Store - Look up the ChartState for an analyst session.

Sessions live in the cache's session tier and expire after
config.session_ttl of inactivity.
"""

import re
from typing import Optional

from cache import CacheManager, cache_manager
from .chart_state import ChartState


SESSION_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,64}$')


class SessionStore:
    """Session id -> ChartState, created on first use."""

    def __init__(self, cache: Optional[CacheManager] = None):
        self._cache = cache or cache_manager

    @staticmethod
    def validate_id(session_id: str) -> str:
        if not session_id or not SESSION_ID_PATTERN.match(session_id):
            raise ValueError("Session id must be 1-64 characters of letters, digits, '-' or '_'")
        return session_id

    def get(self, session_id: str) -> ChartState:
        """Existing state for the session, or a fresh one."""
        self.validate_id(session_id)
        state = self._cache.get_session(session_id)
        if state is None:
            state = ChartState()
            self._cache.set_session(session_id, state)
        return state

    def save(self, session_id: str, state: ChartState) -> None:
        self._cache.set_session(self.validate_id(session_id), state)

    def reset(self, session_id: str) -> ChartState:
        state = ChartState()
        self.save(session_id, state)
        return state

    def delete(self, session_id: str) -> bool:
        return self._cache.delete_session(self.validate_id(session_id))


# Global instance
session_store = SessionStore()
