"""Processing module - Series composition and chart layout."""

from .units import UnitCategory, categorize, readable_unit
from .series import Series, RawSeries, DerivedSeries
from .normalizer import normalize_series, filter_plotted
from .derived import derive_series, build_derived, suggest_defaults
from .axes import AxisAssignment, SeriesStyle, allocate_axes, assign_series_styles
from .pivot import pivot_rows, pivot_frame
from .legend import LegendItem, LegendLayout, LegendMetrics, layout_legend, render_legend_markup
from .export import SurfaceSnapshot, ExportResult, flatten_chart
from .pipeline import ChartPipeline

__all__ = [
    'UnitCategory',
    'categorize',
    'readable_unit',
    'Series',
    'RawSeries',
    'DerivedSeries',
    'normalize_series',
    'filter_plotted',
    'derive_series',
    'build_derived',
    'suggest_defaults',
    'AxisAssignment',
    'SeriesStyle',
    'allocate_axes',
    'assign_series_styles',
    'pivot_rows',
    'pivot_frame',
    'LegendItem',
    'LegendLayout',
    'LegendMetrics',
    'layout_legend',
    'render_legend_markup',
    'SurfaceSnapshot',
    'ExportResult',
    'flatten_chart',
    'ChartPipeline',
]
