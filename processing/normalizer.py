"""
Series Normalizer - Merge fetched and derived series into one plottable list.

Pure mapping over its inputs, cheap enough to run on every request:
- Fetched records get display key "COUNTRY:VARIABLE"
- Derived series keep the key assigned when they were calculated
- Every series gets its category recomputed from its unit descriptor
- Labels honor user overrides keyed by display key
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from .series import (
    Series, RawSeries, DerivedSeries, ORIGIN_FETCHED, ORIGIN_DERIVED, parse_amount,
)
from .units import categorize, readable_unit

logger = logging.getLogger(__name__)


def fetched_display_key(country_code: str, variable_code: str) -> str:
    """Display key for a fetched series."""
    return f"{country_code}:{variable_code}"


def normalize_values(points: Iterable) -> Dict[int, Optional[float]]:
    """
    Turn [{'year': ..., 'amount': ...}, ...] into an ascending year -> amount map.

    Points without a parseable year are skipped. A later point for the same
    year replaces an earlier one.
    """
    by_year: Dict[int, Optional[float]] = {}
    for point in points or []:
        if not isinstance(point, dict):
            continue
        try:
            year = int(point.get('year'))
        except (TypeError, ValueError):
            continue
        by_year[year] = parse_amount(point.get('amount'))
    return dict(sorted(by_year.items()))


def normalize_fetched(raw: RawSeries, custom_names: Optional[Dict[str, str]] = None) -> Series:
    """Normalize one fetched record."""
    custom_names = custom_names or {}
    display_key = fetched_display_key(raw.country_code, raw.variable_code)
    unit = readable_unit(raw.unit_code, raw.unit_descriptor)
    default_label = f"{raw.country_name} - {raw.variable_name} ({unit})"

    return Series(
        display_key=display_key,
        origin=ORIGIN_FETCHED,
        variable_code=raw.variable_code,
        variable_name=raw.variable_name,
        country_code=raw.country_code,
        country_name=raw.country_name,
        unit_code=raw.unit_code,
        unit_descriptor=unit,
        category=categorize(unit),
        values=normalize_values(raw.values),
        display_label=custom_names.get(display_key) or default_label,
    )


def normalize_derived(derived: DerivedSeries, custom_names: Optional[Dict[str, str]] = None) -> Series:
    """Normalize one derived series; its unit may have been edited since creation."""
    custom_names = custom_names or {}
    unit = readable_unit(derived.unit_code, derived.unit_descriptor)
    default_label = f"{derived.variable_name} ({unit}) [Calc]"

    return Series(
        display_key=derived.display_key,
        origin=ORIGIN_DERIVED,
        variable_code=derived.display_key,
        variable_name=derived.variable_name,
        country_code=derived.country_code,
        country_name=derived.country_name,
        unit_code=derived.unit_code,
        unit_descriptor=unit,
        category=categorize(unit),
        values=dict(sorted(derived.values.items())),
        display_label=custom_names.get(derived.display_key) or default_label,
    )


def normalize_series(
    raw_records: Iterable,
    derived_series: Iterable[DerivedSeries] = (),
    custom_names: Optional[Dict[str, str]] = None,
) -> List[Series]:
    """
    Build the full plottable list: fetched first (in input order), then derived.

    Args:
        raw_records: RawSeries objects or backend dicts. None entries (still
            loading or failed fetches) are skipped.
        derived_series: Calculated series from the chart state
        custom_names: display_key -> user label overrides

    Returns:
        List of Series with unique display keys (first occurrence wins)
    """
    result: List[Series] = []
    seen: Set[str] = set()

    for record in raw_records or []:
        raw = record if isinstance(record, RawSeries) else RawSeries.from_dict(record)
        if raw is None:
            logger.debug(f"Skipping unusable raw series record: {record!r}")
            continue

        series = normalize_fetched(raw, custom_names)
        if series.display_key in seen:
            logger.debug(f"Duplicate series {series.display_key} ignored")
            continue
        seen.add(series.display_key)
        result.append(series)

    for derived in derived_series or []:
        series = normalize_derived(derived, custom_names)
        if series.display_key in seen:
            logger.debug(f"Duplicate series {series.display_key} ignored")
            continue
        seen.add(series.display_key)
        result.append(series)

    return result


def filter_plotted(series: Iterable[Series], plotted_keys: Iterable[str]) -> List[Series]:
    """Keep only series whose display key is plotted, preserving list order."""
    keys = set(plotted_keys or ())
    return [s for s in series if s.display_key in keys]
