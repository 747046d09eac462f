"""
Chart State - Selection, plotted keys, derived series and user labels.

One ChartState per analyst session. It is passed explicitly into every
pipeline call; the pipeline never reads it from a global.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from processing.series import DerivedSeries


def _toggle(items: list, item) -> list:
    """Remove item if present, else append it. Returns a new list."""
    if item in items:
        return [i for i in items if i != item]
    return [*items, item]


@dataclass
class ChartState:
    """Everything the user has chosen or edited for one chart."""

    # Filter selection (drives which raw series are fetched)
    selected_country_codes: List[str] = field(default_factory=list)
    selected_variable_codes: List[str] = field(default_factory=list)
    selected_years: List[int] = field(default_factory=list)

    # What is drawn
    plotted_keys: Set[str] = field(default_factory=set)
    derived_series: List[DerivedSeries] = field(default_factory=list)

    # User preferences
    custom_series_names: Dict[str, str] = field(default_factory=dict)
    custom_axis_labels: Dict[str, str] = field(default_factory=dict)
    show_dots: bool = True

    # Legend box last reported by the renderer; None falls back to config
    legend_width: Optional[float] = None
    legend_height: Optional[float] = None

    # =========================================================================
    # Selection
    # =========================================================================

    def toggle_country(self, code: str) -> None:
        self.selected_country_codes = _toggle(self.selected_country_codes, code)

    def toggle_variable(self, code: str) -> None:
        self.selected_variable_codes = _toggle(self.selected_variable_codes, code)

    def toggle_year(self, year: int) -> None:
        self.selected_years = sorted(_toggle(self.selected_years, int(year)))

    def set_selection(
        self,
        country_codes: Optional[Iterable[str]] = None,
        variable_codes: Optional[Iterable[str]] = None,
        years: Optional[Iterable[int]] = None,
    ) -> None:
        """Replace any of the three selection lists (None leaves it unchanged)."""
        if country_codes is not None:
            self.selected_country_codes = list(dict.fromkeys(country_codes))
        if variable_codes is not None:
            self.selected_variable_codes = list(dict.fromkeys(variable_codes))
        if years is not None:
            self.selected_years = sorted({int(y) for y in years})

    # =========================================================================
    # Plotted series
    # =========================================================================

    def toggle_plotted(self, key: str) -> bool:
        """Toggle a display key. Returns True if it is now plotted."""
        keys = set(self.plotted_keys)
        if key in keys:
            keys.discard(key)
        else:
            keys.add(key)
        self.plotted_keys = keys
        return key in keys

    def set_plotted(self, keys: Iterable[str]) -> None:
        self.plotted_keys = set(keys)

    # =========================================================================
    # Derived series
    # =========================================================================

    def add_derived(self, derived: DerivedSeries, plot: bool = True) -> None:
        """Store a derived series, replacing one with the same key, and plot it."""
        self.derived_series = [
            d for d in self.derived_series if d.display_key != derived.display_key
        ] + [derived]
        if plot:
            self.plotted_keys = set(self.plotted_keys) | {derived.display_key}

    def get_derived(self, key: str) -> Optional[DerivedSeries]:
        for derived in self.derived_series:
            if derived.display_key == key:
                return derived
        return None

    def remove_derived(self, key: str) -> bool:
        """Drop a derived series and unplot it. Returns False if it did not exist."""
        if self.get_derived(key) is None:
            return False
        self.derived_series = [d for d in self.derived_series if d.display_key != key]
        self.plotted_keys = set(self.plotted_keys) - {key}
        return True

    def clear_derived(self) -> None:
        keys = {d.display_key for d in self.derived_series}
        self.derived_series = []
        self.plotted_keys = set(self.plotted_keys) - keys

    # =========================================================================
    # Labels
    # =========================================================================

    def set_custom_series_name(self, key: str, name: str) -> None:
        """Set a label override; a blank name clears it."""
        names = dict(self.custom_series_names)
        if not name or not name.strip():
            names.pop(key, None)
        else:
            names[key] = name.strip()
        self.custom_series_names = names

    def set_custom_axis_label(self, axis_id: str, label: str) -> None:
        """Set an axis label override; a blank label clears it."""
        labels = dict(self.custom_axis_labels)
        if not label or not label.strip():
            labels.pop(axis_id, None)
        else:
            labels[axis_id] = label.strip()
        self.custom_axis_labels = labels

    def toggle_show_dots(self) -> bool:
        self.show_dots = not self.show_dots
        return self.show_dots

    def set_legend_size(self, width: Optional[float] = None, height: Optional[float] = None) -> None:
        """Record the legend box the live chart was laid out in. Non-positive or None leaves a side unchanged."""
        if width is not None and width > 0:
            self.legend_width = float(width)
        if height is not None and height > 0:
            self.legend_height = float(height)

    # =========================================================================
    # Utilities
    # =========================================================================

    def reset(self) -> None:
        """Back to an empty chart."""
        fresh = ChartState()
        self.__dict__.update(fresh.__dict__)

    def to_dict(self) -> dict:
        return {
            'selected_country_codes': list(self.selected_country_codes),
            'selected_variable_codes': list(self.selected_variable_codes),
            'selected_years': list(self.selected_years),
            'plotted_keys': sorted(self.plotted_keys),
            'derived_keys': [d.display_key for d in self.derived_series],
            'custom_series_names': dict(self.custom_series_names),
            'custom_axis_labels': dict(self.custom_axis_labels),
            'show_dots': self.show_dots,
            'legend_width': self.legend_width,
            'legend_height': self.legend_height,
        }
