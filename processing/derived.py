"""
Derived Series - Combine two series with an arithmetic operator, aligned by year.

The calculator is one-shot: the result is a snapshot stored in the chart
state and is never recomputed when its operands change later.

Gap rules:
- A year missing from A is skipped (no interpolation, no extrapolation)
- Divide by zero, a missing operand amount, or a non-finite result
  becomes an explicit NaN gap, never 0
"""

import math
import time
from typing import Optional, Tuple

from .series import (
    Series, DerivedSeries, COMBINED_COUNTRY_CODE, COMBINED_COUNTRY_NAME,
)
from .normalizer import normalize_derived


OPERATION_DIVIDE = 'divide'
OPERATION_SUBTRACT = 'subtract'
OPERATIONS = (OPERATION_DIVIDE, OPERATION_SUBTRACT)

MAX_KEY_LENGTH = 50


def suggest_defaults(a: Series, b: Series, operation: str) -> Tuple[str, str]:
    """
    Propose (name, unit) for a new derived series.

    Subtracting two series with the same unit keeps that unit instead of
    a synthesized "Difference (...)" label.
    """
    name_a, name_b = a.variable_name, b.variable_name
    unit_a, unit_b = a.unit_descriptor, b.unit_descriptor

    if operation == OPERATION_DIVIDE:
        return f"Ratio: ({name_a}) / ({name_b})", f"Ratio ({unit_a}/{unit_b})"
    if operation == OPERATION_SUBTRACT:
        unit = unit_a if unit_a == unit_b else f"Difference ({unit_a} - {unit_b})"
        return f"Diff: ({name_a}) - ({name_b})", unit
    raise ValueError(f"Unknown operation '{operation}'. Expected one of: {', '.join(OPERATIONS)}")


def derived_display_key(key_a: str, key_b: str, operation: str, timestamp: Optional[float] = None) -> str:
    """
    Build a fresh display key: CALC-<A>-<op>-<B>-<suffix>.

    The time-based suffix is kept intact; the operand part is truncated
    so the whole key fits MAX_KEY_LENGTH.
    """
    if timestamp is None:
        timestamp = time.time()
    suffix = format(int(timestamp * 1000), 'x')
    prefix = f"CALC-{key_a}-{operation}-{key_b}"
    prefix = prefix[:MAX_KEY_LENGTH - len(suffix) - 1]
    return f"{prefix}-{suffix}"


def _apply(operation: str, amount_a: Optional[float], amount_b: Optional[float]) -> float:
    if amount_a is None or amount_b is None:
        return math.nan

    if operation == OPERATION_DIVIDE:
        if amount_b == 0:
            return math.nan
        result = amount_a / amount_b
    else:
        result = amount_a - amount_b

    return result if math.isfinite(result) else math.nan


def calculate_values(a: Series, b: Series, operation: str) -> dict:
    """Year-aligned A <op> B over the years of B that A also has."""
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation '{operation}'. Expected one of: {', '.join(OPERATIONS)}")

    a_by_year = dict(a.values)
    result = {}
    for year in sorted(b.values):
        if year not in a_by_year:
            continue
        result[year] = _apply(operation, a_by_year[year], b.values[year])
    return result


def build_derived(
    a: Series,
    b: Series,
    operation: str,
    name: str = '',
    unit: str = '',
    timestamp: Optional[float] = None,
) -> DerivedSeries:
    """
    Calculate the derived record that the chart state stores.

    Blank name or unit fall back to suggest_defaults().
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation '{operation}'. Expected one of: {', '.join(OPERATIONS)}")
    if a.display_key == b.display_key:
        raise ValueError("Series A and Series B must be different series")

    default_name, default_unit = suggest_defaults(a, b, operation)
    name = (name or '').strip() or default_name
    unit = (unit or '').strip() or default_unit

    same_country = a.country_code == b.country_code

    return DerivedSeries(
        display_key=derived_display_key(a.display_key, b.display_key, operation, timestamp),
        variable_name=name,
        unit_descriptor=unit,
        country_code=a.country_code if same_country else COMBINED_COUNTRY_CODE,
        country_name=a.country_name if same_country else COMBINED_COUNTRY_NAME,
        values=calculate_values(a, b, operation),
        source_a_key=a.display_key,
        source_b_key=b.display_key,
        operation=operation,
    )


def derive_series(
    a: Series,
    b: Series,
    operation: str,
    name: str = '',
    unit: str = '',
    timestamp: Optional[float] = None,
) -> Series:
    """
    Derive a new normalized series from A and B.

    Args:
        a: Left operand
        b: Right operand
        operation: 'divide' (A / B) or 'subtract' (A - B)
        name: Display name for the new series
        unit: Unit descriptor; its category drives axis assignment
        timestamp: Seconds since epoch for the key suffix (defaults to now)

    Returns:
        Normalized Series with origin 'derived'

    Raises:
        ValueError: unknown operation, or A and B are the same series
    """
    return normalize_derived(build_derived(a, b, operation, name, unit, timestamp))
