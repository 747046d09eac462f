"""
Export Flattening - Turn the live chart SVG into one standalone document.

Steps:
1. Copy the rendering surface markup
2. Strip the live (interactive) legend fragment
3. Insert an opaque background sized to the declared viewable area
4. Insert the freshly laid-out legend, centred over the plot area

A missing or unreadable snapshot is reported through ExportResult.error;
the flattener never raises and never substitutes an older image.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from config import BACKGROUND_COLORS
from .legend import LegendLayout, render_legend, _num

logger = logging.getLogger(__name__)


SVG_NS = 'http://www.w3.org/2000/svg'
ET.register_namespace('', SVG_NS)
ET.register_namespace('xlink', 'http://www.w3.org/1999/xlink')

# Class names marking the live legend inside the rendered surface
LIVE_LEGEND_CLASSES = ('recharts-legend-wrapper', 'live-legend')

EXPORT_UNAVAILABLE = 'Chart surface snapshot unavailable'


@dataclass
class SurfaceSnapshot:
    """The on-screen chart as handed over by the renderer."""

    markup: str
    width: float
    height: float
    plot_left: float = 0.0
    plot_width: Optional[float] = None  # defaults to the full surface width


@dataclass
class ExportResult:
    """Outcome of an export; document is None when the export failed."""

    document: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None and bool(self.document)


SnapshotProvider = Callable[[], Optional[SurfaceSnapshot]]


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ''
    return tag.rsplit('}', 1)[-1]


def _is_live_legend(element: ET.Element) -> bool:
    if _local_name(element.tag) == 'foreignObject':
        return True
    classes = (element.get('class') or '').split()
    return any(name in classes for name in LIVE_LEGEND_CLASSES)


def strip_live_legend(root: ET.Element) -> int:
    """Remove live legend fragments anywhere under root. Returns how many were removed."""
    removed = 0
    for parent in list(root.iter()):
        for child in list(parent):
            if _is_live_legend(child):
                parent.remove(child)
                removed += 1
    return removed


def declared_size(root: ET.Element, snapshot: SurfaceSnapshot) -> Tuple[float, float, float, float]:
    """
    The surface's viewable area as (min_x, min_y, width, height).

    Prefers the viewBox, then width/height attributes, then the
    dimensions reported with the snapshot.
    """
    view_box = root.get('viewBox')
    if view_box:
        parts = re.split(r'[\s,]+', view_box.strip())
        if len(parts) == 4:
            try:
                min_x, min_y, width, height = (float(p) for p in parts)
                return min_x, min_y, width, height
            except ValueError:
                logger.debug(f"Ignoring malformed viewBox '{view_box}'")

    width = _parse_length(root.get('width'), snapshot.width)
    height = _parse_length(root.get('height'), snapshot.height)
    return 0.0, 0.0, width, height


def _parse_length(value: Optional[str], fallback: float) -> float:
    if not value:
        return float(fallback)
    match = re.match(r'^\s*([0-9.]+)\s*(px)?\s*$', value)
    if not match:
        return float(fallback)
    try:
        return float(match.group(1))
    except ValueError:
        return float(fallback)


def _svg(tag: str, namespaced: bool = True) -> str:
    return f"{{{SVG_NS}}}{tag}" if namespaced else tag


def _qualify(element: ET.Element, namespaced: bool) -> ET.Element:
    """Match a generated element tree to the surface's namespace usage."""
    if namespaced:
        for node in element.iter():
            if isinstance(node.tag, str) and not node.tag.startswith('{'):
                node.tag = _svg(node.tag)
    return element


def flatten_chart(
    snapshot: Optional[SurfaceSnapshot],
    layout: LegendLayout,
    theme: str = 'light',
    legend_top: float = 10.0,
) -> ExportResult:
    """
    Produce the standalone SVG document.

    Args:
        snapshot: Current rendering surface, or None when unavailable
        layout: Legend layout computed for this export
        theme: 'light' or 'dark' (background and legend text colours)
        legend_top: Vertical offset of the legend from the top edge

    Returns:
        ExportResult with the serialized SVG, or an error message
    """
    if snapshot is None or not (snapshot.markup or '').strip():
        logger.warning(f"Export failed: {EXPORT_UNAVAILABLE}")
        return ExportResult(error=EXPORT_UNAVAILABLE)

    try:
        root = ET.fromstring(snapshot.markup)
    except ET.ParseError as e:
        logger.warning(f"Export failed: surface markup could not be parsed ({e})")
        return ExportResult(error=f"Chart surface markup could not be parsed: {e}")

    if _local_name(root.tag) != 'svg':
        return ExportResult(error=f"Chart surface is not an SVG document (root <{_local_name(root.tag)}>)")

    removed = strip_live_legend(root)
    if removed:
        logger.debug(f"Stripped {removed} live legend fragment(s) from export")

    min_x, min_y, width, height = declared_size(root, snapshot)
    namespaced = root.tag.startswith('{')
    if not namespaced:
        root.set('xmlns', SVG_NS)

    if not root.get('width'):
        root.set('width', _num(width))
    if not root.get('height'):
        root.set('height', _num(height))

    background = ET.Element(_svg('rect', namespaced), {
        'x': _num(min_x),
        'y': _num(min_y),
        'width': _num(width),
        'height': _num(height),
        'fill': BACKGROUND_COLORS.get(theme, BACKGROUND_COLORS['light']),
    })
    root.insert(0, background)

    if layout.placed:
        plot_width = snapshot.plot_width if snapshot.plot_width is not None else width
        legend_x = snapshot.plot_left + (plot_width - layout.actual_width) / 2
        legend = _qualify(render_legend(layout, theme), namespaced)
        legend.set('transform', f"translate({_num(max(0.0, legend_x))}, {_num(min_y + legend_top)})")
        root.append(legend)

    document = ET.tostring(root, encoding='unicode')
    return ExportResult(document='<?xml version="1.0" encoding="UTF-8"?>\n' + document)

