"""
Legend Layout - Greedy line-wrapping placement of legend entries.

The same layout feeds the live legend and the exported SVG; both must agree.
Text width is estimated as characters x font size x factor, with no font
measurement.
"""

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

from config import LEGEND_TEXT_COLORS
from .axes import SeriesStyle
from .series import Series


@dataclass
class LegendMetrics:
    """Sizes used by the layout, in SVG user units."""

    item_height: float = 20.0
    symbol_width: float = 20.0
    symbol_gap: float = 6.0
    font_size: float = 12.0
    char_width_factor: float = 0.6
    padding_horizontal: float = 15.0
    padding_vertical: float = 5.0
    font_family: str = 'Arial, sans-serif'
    stroke_width: float = 2.5

    def text_width(self, label: str) -> float:
        return len(label) * self.font_size * self.char_width_factor

    def item_width(self, label: str) -> float:
        return self.symbol_width + self.symbol_gap + self.text_width(label)


@dataclass
class LegendItem:
    display_key: str
    label: str
    color: str
    dash_pattern: Optional[str] = None


@dataclass
class PlacedLegendItem:
    """A legend item positioned for one layout pass. y is the row's centre line."""

    item: LegendItem
    x: float
    y: float
    width: float

    def to_dict(self) -> dict:
        return {
            'display_key': self.item.display_key,
            'label': self.item.label,
            'color': self.item.color,
            'dash_pattern': self.item.dash_pattern,
            'x': self.x,
            'y': self.y,
            'width': self.width,
        }


@dataclass
class LegendLayout:
    placed: List[PlacedLegendItem] = field(default_factory=list)
    actual_width: float = 0.0
    actual_height: float = 0.0
    metrics: LegendMetrics = field(default_factory=LegendMetrics)
    total_items: int = 0

    @property
    def truncated_count(self) -> int:
        """Items dropped because they did not fit the available height."""
        return max(0, self.total_items - len(self.placed))

    def to_dict(self) -> dict:
        return {
            'items': [p.to_dict() for p in self.placed],
            'actual_width': self.actual_width,
            'actual_height': self.actual_height,
            'truncated': self.truncated_count,
        }


def build_legend_items(series: List[Series], styles: List[SeriesStyle]) -> List[LegendItem]:
    """Legend entries in plotting order, labelled with each series' resolved label."""
    style_by_key = {style.display_key: style for style in styles}
    items = []
    for s in series:
        style = style_by_key.get(s.display_key)
        items.append(LegendItem(
            display_key=s.display_key,
            label=s.display_label or s.display_key,
            color=style.color if style else 'black',
            dash_pattern=style.dash_pattern if style else None,
        ))
    return items


def layout_legend(
    items: List[LegendItem],
    available_width: float = math.inf,
    available_height: float = math.inf,
    metrics: Optional[LegendMetrics] = None,
) -> LegendLayout:
    """
    Place legend items left to right, wrapping to a new row when full.

    An item wraps only when the current row already holds something, so a
    single over-wide item still gets a row of its own. Once a wrapped row
    would start below available_height, the remaining items are dropped; a
    height too small for the first row places nothing.

    Returns:
        LegendLayout; actual_width is the widest row (without trailing
        padding), actual_height is the last row's centre plus half a row.
    """
    metrics = metrics or LegendMetrics()
    if not items:
        return LegendLayout(metrics=metrics)
    if metrics.item_height / 2 > available_height:
        return LegendLayout(metrics=metrics, total_items=len(items))

    placed: List[PlacedLegendItem] = []
    x = 0.0
    y = metrics.item_height / 2
    max_line_width = 0.0

    for item in items:
        width = metrics.item_width(item.label)

        if x > 0 and x + width > available_width:
            next_y = y + metrics.item_height + metrics.padding_vertical
            if next_y > available_height:
                break
            x = 0.0
            y = next_y

        placed.append(PlacedLegendItem(item=item, x=x, y=y, width=width))
        max_line_width = max(max_line_width, x + width)
        x += width + metrics.padding_horizontal

    return LegendLayout(
        placed=placed,
        actual_width=max_line_width,
        actual_height=y + metrics.item_height / 2,
        metrics=metrics,
        total_items=len(items),
    )


def render_legend(layout: LegendLayout, theme: str = 'light') -> ET.Element:
    """
    Render a layout as an SVG <g> element positioned at the origin.

    ElementTree escapes label text and attribute values on serialization.
    """
    metrics = layout.metrics
    text_color = LEGEND_TEXT_COLORS.get(theme, LEGEND_TEXT_COLORS['light'])

    group = ET.Element('g', {'class': 'export-legend'})
    for index, placed in enumerate(layout.placed):
        item = placed.item
        item_id = f"legend-item-gen-{index}-{item.display_key.replace(' ', '_')}"
        item_group = ET.SubElement(group, 'g', {
            'id': item_id,
            'transform': f"translate({_num(placed.x)}, {_num(placed.y)})",
        })

        line_attrs = {
            'x1': '0', 'y1': '0',
            'x2': _num(metrics.symbol_width), 'y2': '0',
            'stroke': item.color or 'black',
            'stroke-width': _num(metrics.stroke_width),
        }
        if item.dash_pattern:
            line_attrs['stroke-dasharray'] = item.dash_pattern
        ET.SubElement(item_group, 'line', line_attrs)

        text = ET.SubElement(item_group, 'text', {
            'x': _num(metrics.symbol_width + metrics.symbol_gap),
            'y': '0',
            'dy': '0.35em',
            'fill': text_color,
            'font-size': f"{_num(metrics.font_size)}px",
            'font-family': metrics.font_family,
            'text-anchor': 'start',
        })
        text.text = item.label

    return group


def render_legend_markup(layout: LegendLayout, theme: str = 'light') -> str:
    """Legend <g> as a string, for embedding in the live chart."""
    if not layout.placed:
        return ''
    return ET.tostring(render_legend(layout, theme), encoding='unicode')


def _num(value: float) -> str:
    """Compact number formatting for SVG attributes."""
    return f"{value:.2f}".rstrip('0').rstrip('.')
