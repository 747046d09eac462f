"""
Unit Categorization - Map free-text unit descriptors to axis categories.

Series sharing a category share a Y axis, so the mapping must be stable:
the same descriptor always lands in the same category.

Rules are an ordered table evaluated top to bottom. Specific markers
(e.g. "2015=100") sit above generic keywords (e.g. "eur") so a generic
keyword never shadows a specific one. Anything unmatched is 'Other'.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Tuple


class UnitCategory(str, Enum):
    """Closed set of unit categories, one Y axis each."""

    INDEX = 'Index'
    PERCENTAGE = 'Percentage'
    SHARE = 'Share'
    CURRENCY = 'Currency'
    PPS = 'PurchasingPowerStandard'
    COUNT = 'Count'
    RATIO = 'Ratio'
    PRODUCTIVITY = 'Productivity'
    OTHER = 'Other'


@dataclass(frozen=True)
class UnitRule:
    """One row of the categorization table."""

    category: UnitCategory
    contains: Tuple[str, ...] = ()
    starts_with: Tuple[str, ...] = ()
    ends_with: Tuple[str, ...] = ()
    pattern: Optional[Pattern] = None
    excludes: Tuple[str, ...] = ()

    def matches(self, unit_lower: str) -> bool:
        if any(word in unit_lower for word in self.excludes):
            return False
        if any(word in unit_lower for word in self.contains):
            return True
        if self.starts_with and unit_lower.startswith(self.starts_with):
            return True
        if self.ends_with and unit_lower.endswith(self.ends_with):
            return True
        if self.pattern is not None and self.pattern.search(unit_lower):
            return True
        return False


# =============================================================================
# RULE TABLE (priority order)
# =============================================================================

UNIT_RULES: Tuple[UnitRule, ...] = (
    # "2015=100", "index", "base year" - checked first so an index of a
    # currency aggregate ("Index 2010=100 (EUR)") stays an index
    UnitRule(
        UnitCategory.INDEX,
        contains=('index', 'base year'),
        pattern=re.compile(r'\b\d{4}\s*=\s*100\b'),
    ),

    # Explicit ratios, including calculated "Ratio (A/B)" units whose
    # operand units would otherwise match a later rule
    UnitRule(
        UnitCategory.RATIO,
        pattern=re.compile(r'\bratio\b'),
    ),

    # Share of a total
    UnitRule(
        UnitCategory.SHARE,
        contains=('share of', 'share in', 'proportion of'),
    ),

    # "% of GDP", "percentage of", "... %"
    UnitRule(
        UnitCategory.PERCENTAGE,
        contains=('percentage', 'percent', '% of'),
        starts_with=('%',),
        ends_with=('%',),
    ),

    # Purchasing power standards before currency ("million pps" is not EUR)
    UnitRule(
        UnitCategory.PPS,
        contains=('purchasing power',),
        pattern=re.compile(r'\bpps\b'),
    ),

    # Output per unit of labour before currency ("EUR per hour worked")
    UnitRule(
        UnitCategory.PRODUCTIVITY,
        contains=('productivity', 'per hour worked', 'per person employed', 'per employee'),
    ),

    # Unit-shaped head counts before currency ("million persons")
    UnitRule(
        UnitCategory.COUNT,
        contains=('persons', 'number of'),
    ),

    UnitRule(
        UnitCategory.CURRENCY,
        contains=('ecu/eur', 'eur', 'national currency', 'usd', 'dollar', 'mrd'),
        pattern=re.compile(r'\b(bn|mio|million|billion)\b'),
    ),

    # Head-count subjects only when no currency is named
    UnitRule(
        UnitCategory.COUNT,
        contains=('capita', 'population', 'employee', 'employment', 'jobs'),
    ),

    # Bare thousands without a currency are head counts
    UnitRule(
        UnitCategory.COUNT,
        pattern=re.compile(r'\b(thousand|thousands|ths)\b'),
        excludes=('currency', 'eur'),
    ),

    # "EUR/person" style quotients were caught above; what remains is a plain quotient
    UnitRule(
        UnitCategory.RATIO,
        contains=('/',),
    ),
)


def categorize(unit_descriptor: Optional[str]) -> UnitCategory:
    """
    Categorize a unit descriptor.

    Total: never raises, returns UnitCategory.OTHER for empty input or
    when no rule matches.

    Examples:
        'Index, 2015=100'        -> Index
        '% of GDP'               -> Percentage
        'Million EUR'            -> Currency
        'Thousand persons'       -> Count
        'Original units'         -> Other
    """
    if not unit_descriptor:
        return UnitCategory.OTHER

    unit_lower = str(unit_descriptor).strip().lower()
    if not unit_lower:
        return UnitCategory.OTHER

    for rule in UNIT_RULES:
        if rule.matches(unit_lower):
            return rule.category

    return UnitCategory.OTHER


def readable_unit(unit_code, unit_descriptor: Optional[str]) -> str:
    """Return the backend's descriptor, or a code placeholder when it is blank."""
    if unit_descriptor and unit_descriptor.strip():
        return unit_descriptor
    return f"Code: {unit_code}"
