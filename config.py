"""
Series Composer - Centralized Configuration

All environment variables, constants, and settings in one place.
"""

import os
from dataclasses import dataclass


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # Indicator backend
    indicator_api_url: str = 'http://localhost:8080/api'
    fetch_timeout: float = 15.0

    # Cache settings
    data_cache_ttl: int = 300          # 5 minutes, matches the frontend staleTime
    session_ttl: int = 86400           # 24 hours
    max_cache_size: int = 5000

    # Chart settings
    max_axes: int = 4
    legend_width: float = 800.0        # plot width assumed until the renderer reports one
    legend_height: float = 60.0
    legend_top_offset: float = 10.0
    default_theme: str = 'light'

    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            indicator_api_url=os.environ.get('INDICATOR_API_URL', 'http://localhost:8080/api').rstrip('/'),
            fetch_timeout=float(os.environ.get('FETCH_TIMEOUT', 15.0)),

            # Allow override via env
            data_cache_ttl=int(os.environ.get('DATA_CACHE_TTL', 300)),
            session_ttl=int(os.environ.get('SESSION_TTL', 86400)),
            max_cache_size=int(os.environ.get('MAX_CACHE_SIZE', 5000)),
            max_axes=int(os.environ.get('MAX_AXES', 4)),
            legend_width=float(os.environ.get('LEGEND_WIDTH', 800.0)),
            legend_height=float(os.environ.get('LEGEND_HEIGHT', 60.0)),
            default_theme='dark' if os.environ.get('DEFAULT_THEME', '').lower() == 'dark' else 'light',
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        )


# Global config instance
config = Config.from_env()


# Per-series line colours, assigned by plotting position
LINE_COLORS = [
    '#0ea5e9', '#ef4444', '#22c55e', '#eab308', '#8b5cf6', '#ec4899', '#f97316', '#14b8a6',
    '#3b82f6', '#a855f7', '#d946ef', '#84cc16', '#64748b', '#78716c', '#06b6d4', '#f59e0b',
]

# Axis stroke colour per theme
AXIS_COLORS = {
    'light': '#6b7280',
    'dark': '#9ca3af',
}

# Opaque export background per theme
BACKGROUND_COLORS = {
    'light': '#ffffff',
    'dark': '#1e293b',
}

# Legend label colour per theme
LEGEND_TEXT_COLORS = {
    'light': 'rgb(55, 65, 81)',
    'dark': 'rgb(226, 232, 240)',
}
