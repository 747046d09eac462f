"""
Chart Pipeline - The operations the rest of the app calls.

Built per request from explicit inputs (the session's ChartState and the
raw records fetched for its selection). Every stage is a pure function of
those inputs; results are memoized per pipeline instance.
"""

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from config import config
from .axes import AxisAssignment, SeriesStyle, allocate_axes, assign_series_styles
from .derived import build_derived
from .export import ExportResult, SnapshotProvider, flatten_chart
from .legend import LegendItem, LegendLayout, LegendMetrics, build_legend_items, layout_legend
from .normalizer import filter_plotted, normalize_series
from .pivot import pivot_rows
from .series import Series

if TYPE_CHECKING:
    from state import ChartState

logger = logging.getLogger(__name__)


class ChartPipeline:
    """
    Series composition and chart layout for one chart state.

    Args:
        state: The session's ChartState (read, and written only by derive_series)
        raw_records: Backend records for the current selection; None entries
            and failed fetches are treated as absent series
        snapshot_provider: Returns the live rendering surface, or None
        metrics: Legend metrics shared by live and exported legends
    """

    def __init__(
        self,
        state: "ChartState",
        raw_records: Optional[Iterable] = None,
        snapshot_provider: Optional[SnapshotProvider] = None,
        metrics: Optional[LegendMetrics] = None,
    ):
        self._state = state
        self._raw_records = list(raw_records or [])
        self._snapshot_provider = snapshot_provider
        self._metrics = metrics or LegendMetrics()
        self._plottable: Optional[List[Series]] = None

    # =========================================================================
    # Series
    # =========================================================================

    def get_plottable_series(self) -> List[Series]:
        """All normalized series (fetched then derived), before the plotted filter."""
        if self._plottable is None:
            self._plottable = normalize_series(
                self._raw_records,
                self._state.derived_series,
                self._state.custom_series_names,
            )
        return self._plottable

    def get_plotted_series(self) -> List[Series]:
        return filter_plotted(self.get_plottable_series(), self._state.plotted_keys)

    def find_series(self, display_key: str) -> Optional[Series]:
        for s in self.get_plottable_series():
            if s.display_key == display_key:
                return s
        return None

    # =========================================================================
    # Axes and rows
    # =========================================================================

    def get_axis_assignments(self, plotted: Optional[List[Series]] = None) -> List[AxisAssignment]:
        if plotted is None:
            plotted = self.get_plotted_series()
        return allocate_axes(plotted, self._state.custom_axis_labels, config.max_axes)

    def get_series_styles(self, plotted: Optional[List[Series]] = None) -> List[SeriesStyle]:
        if plotted is None:
            plotted = self.get_plotted_series()
        return assign_series_styles(plotted, self.get_axis_assignments(plotted))

    def get_pivot_rows(self, plotted: Optional[List[Series]] = None) -> List[dict]:
        if plotted is None:
            plotted = self.get_plotted_series()
        return pivot_rows(plotted)

    # =========================================================================
    # Derived series
    # =========================================================================

    def derive_series(
        self,
        key_a: str,
        key_b: str,
        operation: str,
        name: str = '',
        unit: str = '',
        timestamp: Optional[float] = None,
    ) -> Series:
        """
        Calculate A <op> B from two plotted series and store it in the state.

        Raises:
            KeyError: an operand is not currently plotted
            ValueError: unknown operation or identical operands
        """
        plotted = {s.display_key: s for s in self.get_plotted_series()}
        missing = [key for key in (key_a, key_b) if key not in plotted]
        if missing:
            raise KeyError(f"Series not plotted: {', '.join(missing)}")

        derived = build_derived(plotted[key_a], plotted[key_b], operation, name, unit, timestamp)
        self._state.add_derived(derived)
        self._plottable = None
        logger.info(f"Derived series {derived.display_key} ({len(derived.values)} points)")

        return self.find_series(derived.display_key)

    # =========================================================================
    # Legend and export
    # =========================================================================

    def get_legend_items(self, plotted: Optional[List[Series]] = None) -> List[LegendItem]:
        if plotted is None:
            plotted = self.get_plotted_series()
        return build_legend_items(plotted, self.get_series_styles(plotted))

    def legend_size(self) -> Tuple[float, float]:
        """Legend box (width, height): the size the live chart last reported, else config."""
        return (
            self._state.legend_width or config.legend_width,
            self._state.legend_height or config.legend_height,
        )

    def layout_legend(
        self,
        items: Optional[List[LegendItem]] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> LegendLayout:
        """Lay out legend items (the plotted series' by default) in the given box or legend_size()."""
        if items is None:
            items = self.get_legend_items()
        default_width, default_height = self.legend_size()
        return layout_legend(
            items,
            default_width if width is None else width,
            default_height if height is None else height,
            self._metrics,
        )

    def export_flattened_document(self, theme: Optional[str] = None) -> ExportResult:
        """
        Flatten the live surface plus a fresh legend layout into one SVG.

        The legend is laid out in legend_size(), the same box the live
        legend uses, so both wrap and truncate identically. The snapshot's
        plot area only positions it.
        """
        snapshot = self._snapshot_provider() if self._snapshot_provider else None
        if snapshot is None:
            return flatten_chart(None, LegendLayout(metrics=self._metrics))

        return flatten_chart(
            snapshot,
            self.layout_legend(),
            theme or config.default_theme,
            config.legend_top_offset,
        )
