"""
Shared fixtures for the chart composition tests.

Provides raw backend records, normalized series builders, and isolated
cache/session instances so tests never touch the module-level globals.
"""

import pytest

from cache import CacheManager
from processing.series import Series
from processing.units import categorize
from state import ChartState, SessionStore


# ============================================================================
# Series Builders
# ============================================================================

def make_series(
    display_key,
    values,
    unit='Million EUR',
    variable_name=None,
    country_code='DEU',
    country_name='Germany',
    origin='fetched',
    label=None,
):
    """Build a normalized Series directly, bypassing the normalizer."""
    return Series(
        display_key=display_key,
        origin=origin,
        variable_code=display_key.split(':')[-1],
        variable_name=variable_name or display_key,
        country_code=country_code,
        country_name=country_name,
        unit_code='',
        unit_descriptor=unit,
        category=categorize(unit),
        values=dict(sorted(values.items())),
        display_label=label or display_key,
    )


def make_record(country_code, variable_code, values, unit='Million EUR', country_name=None, variable_name=None):
    """Build a backend record in the camelCase wire shape."""
    return {
        'countryCode': country_code,
        'countryName': country_name or country_code,
        'variableCode': variable_code,
        'variableName': variable_name or variable_code,
        'unitCode': 'U1',
        'unitDescriptor': unit,
        'values': [{'year': year, 'amount': amount} for year, amount in values.items()],
    }


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def gdp_record():
    return make_record(
        'DEU', 'GDP',
        {2019: 3400.0, 2020: 3300.0, 2021: 3600.0},
        unit='Million EUR',
        country_name='Germany',
        variable_name='Gross domestic product',
    )


@pytest.fixture
def population_record():
    return make_record(
        'DEU', 'POP',
        {2019: 83.0, 2020: 83.1, 2021: 83.2},
        unit='Million persons',
        country_name='Germany',
        variable_name='Population',
    )


@pytest.fixture
def cache():
    """Isolated cache manager."""
    return CacheManager(max_size=100)


@pytest.fixture
def session_store(cache):
    return SessionStore(cache)


@pytest.fixture
def chart_state():
    return ChartState()
