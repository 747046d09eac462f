"""State module - Per-session chart selection and preferences."""

from .chart_state import ChartState
from .session_store import SessionStore, session_store

__all__ = ['ChartState', 'SessionStore', 'session_store']
