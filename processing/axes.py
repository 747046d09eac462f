"""
Axis Allocation - Decide which Y axis each plotted series uses.

Rules:
- One axis per distinct unit category, in first-seen plotting order
- Sides alternate left, right, left, right
- Each axis gets the next dash pattern (first axis always solid), so lines
  sharing the colour palette stay distinguishable by stroke alone
- At most `max_axes` axes; overflow categories fall back to the first axis
- No series -> one generic placeholder axis
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from config import config, LINE_COLORS
from .series import Series

logger = logging.getLogger(__name__)


# Dash patterns per axis, in precedence order (None = solid)
AXIS_LINE_STYLES: List[Optional[str]] = [None, '5 5', '1 5', '10 2 2 2', '3 7']

PLACEHOLDER_AXIS_ID = 'left0'
PLACEHOLDER_AXIS_LABEL = 'Value'

FETCHED_STROKE_WIDTH = 2.0
DERIVED_STROKE_WIDTH = 2.5


@dataclass
class AxisAssignment:
    """One rendered Y axis."""

    axis_id: str
    category: str
    side: str                   # 'left' or 'right'
    line_style: Optional[str]   # SVG stroke-dasharray, None = solid
    color_slot: int             # axis position, indexes the axis colour palette
    label: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SeriesStyle:
    """How one plotted line is drawn."""

    display_key: str
    axis_id: str
    color: str
    dash_pattern: Optional[str]
    stroke_width: float

    def to_dict(self) -> dict:
        return asdict(self)


def ordered_categories(series: List[Series]) -> List[str]:
    """Distinct category names in first-seen order."""
    categories: List[str] = []
    for s in series:
        category = s.category.value
        if category not in categories:
            categories.append(category)
    return categories


def placeholder_axis(custom_axis_labels: Optional[Dict[str, str]] = None) -> AxisAssignment:
    custom_axis_labels = custom_axis_labels or {}
    return AxisAssignment(
        axis_id=PLACEHOLDER_AXIS_ID,
        category=PLACEHOLDER_AXIS_LABEL,
        side='left',
        line_style=AXIS_LINE_STYLES[0],
        color_slot=0,
        label=custom_axis_labels.get(PLACEHOLDER_AXIS_ID) or PLACEHOLDER_AXIS_LABEL,
    )


def allocate_axes(
    series: List[Series],
    custom_axis_labels: Optional[Dict[str, str]] = None,
    max_axes: Optional[int] = None,
) -> List[AxisAssignment]:
    """
    Assign an axis to each distinct category among the plotted series.

    Args:
        series: Plotted series, in plotting order
        custom_axis_labels: axis_id -> user label overrides
        max_axes: Axis cap (defaults to config.max_axes)

    Returns:
        Axis list, never empty
    """
    custom_axis_labels = custom_axis_labels or {}
    if max_axes is None:
        max_axes = config.max_axes
    max_axes = max(1, max_axes)

    categories = ordered_categories(series)
    if not categories:
        return [placeholder_axis(custom_axis_labels)]

    if len(categories) > max_axes:
        logger.debug(f"Axis overflow: {categories[max_axes:]} share axis '{categories[0]}'")

    axes: List[AxisAssignment] = []
    for index, category in enumerate(categories[:max_axes]):
        axes.append(AxisAssignment(
            axis_id=category,
            category=category,
            side='left' if index % 2 == 0 else 'right',
            line_style=AXIS_LINE_STYLES[index % len(AXIS_LINE_STYLES)],
            color_slot=index,
            label=custom_axis_labels.get(category) or category,
        ))

    return axes


def axis_for_series(series: Series, axes: List[AxisAssignment]) -> AxisAssignment:
    """The axis a series is drawn against; overflow categories use the first axis."""
    for axis in axes:
        if axis.axis_id == series.category.value:
            return axis
    return axes[0]


def assign_series_styles(series: List[Series], axes: List[AxisAssignment]) -> List[SeriesStyle]:
    """
    Per-series colour, dash pattern and stroke width.

    Colour follows plotting position (not the axis); the dash pattern
    comes from the series' axis.
    """
    if not axes:
        axes = [placeholder_axis()]

    styles = []
    for index, s in enumerate(series):
        axis = axis_for_series(s, axes)
        styles.append(SeriesStyle(
            display_key=s.display_key,
            axis_id=axis.axis_id,
            color=LINE_COLORS[index % len(LINE_COLORS)],
            dash_pattern=axis.line_style,
            stroke_width=DERIVED_STROKE_WIDTH if s.is_derived else FETCHED_STROKE_WIDTH,
        ))
    return styles
