"""Data sources module - Raw indicator series from the backend."""

from .base import IndicatorDataSource, IndicatorData
from .indicators import IndicatorAPISource
from .manager import IndicatorSourceManager, source_manager

__all__ = [
    'IndicatorDataSource',
    'IndicatorData',
    'IndicatorAPISource',
    'IndicatorSourceManager',
    'source_manager',
]
