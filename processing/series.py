"""
Series Types - The uniform record every pipeline stage consumes.

Fetched indicator records and user-derived series arrive in different
shapes; both are normalized into `Series` before anything else touches them.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .units import UnitCategory


ORIGIN_FETCHED = 'fetched'
ORIGIN_DERIVED = 'derived'

# Synthetic country marker for derived series built from two countries
COMBINED_COUNTRY_CODE = 'CALC'
COMBINED_COUNTRY_NAME = 'Calculated'


@dataclass
class RawSeries:
    """One indicator record as returned by the backend."""

    country_code: str
    country_name: str
    variable_code: str
    variable_name: str
    unit_code: str = ''
    unit_descriptor: str = ''
    values: List[dict] = field(default_factory=list)  # [{'year': 2020, 'amount': 1.5}, ...]

    @classmethod
    def from_dict(cls, record: dict) -> Optional["RawSeries"]:
        """
        Build from a backend record (camelCase keys).

        Returns None when the record has no country or variable code,
        since no display key can be formed for it.
        """
        if not isinstance(record, dict):
            return None

        country_code = record.get('countryCode')
        variable_code = record.get('variableCode')
        if not country_code or not variable_code:
            return None

        unit_descriptor = (
            record.get('unitDescriptor')
            or record.get('unitDescription')
            or record.get('unit')
            or ''
        )

        return cls(
            country_code=str(country_code),
            country_name=record.get('countryName') or str(country_code),
            variable_code=str(variable_code),
            variable_name=record.get('variableName') or str(variable_code),
            unit_code=str(record.get('unitCode') or ''),
            unit_descriptor=unit_descriptor,
            values=list(record.get('values') or []),
        )


@dataclass
class DerivedSeries:
    """A calculated series as held in the chart state (a snapshot, never recomputed)."""

    display_key: str
    variable_name: str
    unit_descriptor: str
    country_code: str
    country_name: str
    values: Dict[int, Optional[float]]
    source_a_key: str = ''
    source_b_key: str = ''
    operation: str = ''
    unit_code: str = 'CALC'


@dataclass
class Series:
    """A normalized, plottable series."""

    display_key: str
    origin: str                         # ORIGIN_FETCHED or ORIGIN_DERIVED
    variable_code: str
    variable_name: str
    country_code: str
    country_name: str
    unit_code: str
    unit_descriptor: str
    category: UnitCategory
    values: Dict[int, Optional[float]]  # year -> amount, ascending by year
    display_label: str

    @property
    def is_derived(self) -> bool:
        return self.origin == ORIGIN_DERIVED

    @property
    def years(self) -> List[int]:
        return list(self.values.keys())

    def to_dict(self) -> dict:
        """JSON-safe representation (NaN gaps become None)."""
        return {
            'display_key': self.display_key,
            'origin': self.origin,
            'variable_code': self.variable_code,
            'variable_name': self.variable_name,
            'country_code': self.country_code,
            'country_name': self.country_name,
            'unit_code': self.unit_code,
            'unit_descriptor': self.unit_descriptor,
            'category': self.category.value,
            'display_label': self.display_label,
            'values': [
                {'year': year, 'amount': json_amount(amount)}
                for year, amount in self.values.items()
            ],
        }


def parse_amount(amount) -> Optional[float]:
    """Coerce a backend amount to float; None for missing or unparseable."""
    if amount is None or isinstance(amount, bool):
        return None
    try:
        return float(amount)
    except (TypeError, ValueError):
        return None


def json_amount(amount: Optional[float]) -> Optional[float]:
    """NaN gap markers are not valid JSON; send them as null."""
    if amount is None or not math.isfinite(amount):
        return None
    return amount


def is_gap(amount: Optional[float]) -> bool:
    """True for an explicit not-a-number gap marker."""
    return amount is not None and math.isnan(amount)
