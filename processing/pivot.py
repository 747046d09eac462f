"""
Pivot - Join plotted series into one row per year.

Two-pass outer join: first collect every year any series has, then fill
each row with each series' amount. The row set is the union of years; a
series with no entry for a year simply has no key in that row.
"""

from collections import Counter
from typing import Dict, List

import numpy as np
import pandas as pd

from .series import Series


def pivot_rows(series: List[Series]) -> List[dict]:
    """
    Build chart rows: [{'year': 2019, 'DEU:GDP': 1.2, ...}, ...] ascending by year.

    Absent amounts leave the key out; NaN gap markers are kept so the
    renderer draws a break. Pure and idempotent.
    """
    if not series:
        return []

    # Pass 1: every year in any series
    rows: Dict[int, dict] = {}
    for s in series:
        for year in s.values:
            if year not in rows:
                rows[year] = {'year': year}

    # Pass 2: fill amounts
    for s in series:
        for year, amount in s.values.items():
            if amount is None:
                continue
            rows[year][s.display_key] = amount

    return [rows[year] for year in sorted(rows)]


def pivot_frame(series: List[Series], use_labels: bool = False) -> pd.DataFrame:
    """
    Same join as pivot_rows() as a DataFrame: index = year, one column per series.

    Missing amounts and gaps are both NaN here; use this for tabular output,
    not for rendering.

    Args:
        series: Plotted series
        use_labels: Name columns by display label instead of display key;
            a label shared by several series gets its display key appended
    """
    columns = {}
    for s in series:
        columns[s.display_key] = pd.Series(
            {year: (np.nan if amount is None else amount) for year, amount in s.values.items()},
            dtype='float64',
        )

    if not columns:
        return pd.DataFrame(index=pd.Index([], name='year', dtype='int64'))

    frame = pd.DataFrame(columns).sort_index()
    frame.index = frame.index.astype('int64')
    frame.index.name = 'year'
    if use_labels:
        frame = frame.rename(columns=column_labels(series))
    return frame


def column_labels(series: List[Series]) -> Dict[str, str]:
    """display_key -> unique column label, e.g. 'GDP (FRA:GDP)' when two series are labelled 'GDP'."""
    counts = Counter(s.display_label or s.display_key for s in series)
    labels = {}
    for s in series:
        label = s.display_label or s.display_key
        labels[s.display_key] = label if counts[label] == 1 else f"{label} ({s.display_key})"
    return labels
