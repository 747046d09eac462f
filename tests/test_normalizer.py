"""Tests for merging fetched and derived series into the plottable list."""

import math

from processing.normalizer import (
    fetched_display_key, filter_plotted, normalize_series, normalize_values,
)
from processing.series import DerivedSeries, RawSeries, ORIGIN_DERIVED, ORIGIN_FETCHED
from processing.units import UnitCategory

from conftest import make_record


# ============================================================================
# Fetched series
# ============================================================================

def test_fetched_series_key_and_label(gdp_record):
    [series] = normalize_series([gdp_record])

    assert series.display_key == 'DEU:GDP'
    assert series.origin == ORIGIN_FETCHED
    assert series.display_label == 'Germany - Gross domestic product (Million EUR)'
    assert series.category == UnitCategory.CURRENCY
    assert series.values == {2019: 3400.0, 2020: 3300.0, 2021: 3600.0}


def test_display_key_format():
    assert fetched_display_key('FRA', 'UNEMP') == 'FRA:UNEMP'


def test_blank_unit_falls_back_to_code():
    record = make_record('DEU', 'X', {2020: 1.0}, unit='')
    [series] = normalize_series([record])

    assert series.unit_descriptor == 'Code: U1'
    assert series.display_label.endswith('(Code: U1)')
    assert series.category == UnitCategory.OTHER


def test_override_label_wins_across_runs(gdp_record):
    """A user label for DEU:GDP replaces the composite label every time."""
    names = {'DEU:GDP': 'German output'}
    for _ in range(3):
        [series] = normalize_series([gdp_record], custom_names=names)
        assert series.display_label == 'German output'


def test_values_sorted_and_parsed():
    record = make_record('DEU', 'GDP', {})
    record['values'] = [
        {'year': 2021, 'amount': '3.5'},
        {'year': '2019', 'amount': 1},
        {'year': 2020, 'amount': None},
        {'year': 'n/a', 'amount': 9},
        'garbage',
    ]
    [series] = normalize_series([record])

    assert list(series.values) == [2019, 2020, 2021]
    assert series.values[2019] == 1.0
    assert series.values[2020] is None
    assert series.values[2021] == 3.5


def test_later_point_for_same_year_wins():
    values = normalize_values([{'year': 2020, 'amount': 1}, {'year': 2020, 'amount': 2}])
    assert values == {2020: 2.0}


def test_missing_and_failed_records_are_skipped(gdp_record):
    """Still-loading (None) and malformed entries are treated as absent."""
    result = normalize_series([None, gdp_record, {'countryCode': 'DEU'}, 'oops'])
    assert [s.display_key for s in result] == ['DEU:GDP']


def test_duplicate_keys_keep_first(gdp_record):
    second = make_record('DEU', 'GDP', {2020: 1.0}, variable_name='Other GDP')
    result = normalize_series([gdp_record, second])

    assert len(result) == 1
    assert result[0].variable_name == 'Gross domestic product'


def test_accepts_raw_series_objects():
    raw = RawSeries('ITA', 'Italy', 'GDP', 'GDP', unit_descriptor='Million EUR', values=[{'year': 2020, 'amount': 5}])
    [series] = normalize_series([raw])
    assert series.display_key == 'ITA:GDP'


def test_unit_description_alias():
    record = make_record('DEU', 'GDP', {2020: 1.0})
    del record['unitDescriptor']
    record['unitDescription'] = '% of GDP'
    [series] = normalize_series([record])
    assert series.category == UnitCategory.PERCENTAGE


# ============================================================================
# Derived series
# ============================================================================

def _derived(key='CALC-A-divide-B-1', unit='Ratio (EUR/persons)'):
    return DerivedSeries(
        display_key=key,
        variable_name='GDP per head',
        unit_descriptor=unit,
        country_code='DEU',
        country_name='Germany',
        values={2021: 3.0, 2020: math.nan},
    )


def test_derived_follow_fetched(gdp_record):
    result = normalize_series([gdp_record], [_derived()])

    assert [s.origin for s in result] == [ORIGIN_FETCHED, ORIGIN_DERIVED]
    derived = result[1]
    assert derived.display_label == 'GDP per head (Ratio (EUR/persons)) [Calc]'
    assert derived.category == UnitCategory.RATIO
    assert list(derived.values) == [2020, 2021]
    assert math.isnan(derived.values[2020])


def test_derived_category_recomputed_from_unit():
    [series] = normalize_series([], [_derived(unit='% of GDP')])
    assert series.category == UnitCategory.PERCENTAGE


def test_derived_override_label():
    [series] = normalize_series([], [_derived()], {'CALC-A-divide-B-1': 'Per capita'})
    assert series.display_label == 'Per capita'


# ============================================================================
# Plotted filter
# ============================================================================

def test_filter_plotted_keeps_order(gdp_record, population_record):
    series = normalize_series([gdp_record, population_record])

    assert [s.display_key for s in filter_plotted(series, {'DEU:POP', 'DEU:GDP'})] == ['DEU:GDP', 'DEU:POP']
    assert [s.display_key for s in filter_plotted(series, ['DEU:POP'])] == ['DEU:POP']
    assert filter_plotted(series, set()) == []
