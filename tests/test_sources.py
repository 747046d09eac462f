"""Tests for the indicator backend client and the selection fetcher."""

import asyncio

import httpx
import pytest

from sources import IndicatorAPISource, IndicatorData, IndicatorDataSource, IndicatorSourceManager

from conftest import make_record


def _source(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IndicatorAPISource(base_url='http://backend/api/', client=client)


# ============================================================================
# Backend client
# ============================================================================

def test_fetch_sends_selection_params():
    seen = {}

    def handler(request):
        seen['path'] = request.url.path
        seen['params'] = request.url.params
        return httpx.Response(200, json=[make_record('DEU', 'GDP', {2020: 1.0})])

    result = asyncio.run(_source(handler).fetch('DEU', 'GDP', [2019, 2020]))

    assert result.is_valid
    assert result.records[0]['countryCode'] == 'DEU'
    assert seen['path'] == '/api/indicators'
    assert seen['params']['countryCode'] == 'DEU'
    assert seen['params']['variableCode'] == 'GDP'
    assert seen['params'].get_list('years') == ['2019', '2020']


def test_only_first_record_is_kept():
    records = [make_record('DEU', 'GDP', {2020: 1.0}), make_record('DEU', 'GDP', {2020: 2.0})]
    result = asyncio.run(_source(lambda r: httpx.Response(200, json=records)).fetch('DEU', 'GDP'))
    assert len(result.records) == 1


def test_single_object_payload_is_accepted():
    record = make_record('DEU', 'GDP', {2020: 1.0})
    result = asyncio.run(_source(lambda r: httpx.Response(200, json=record)).fetch('DEU', 'GDP'))
    assert result.is_valid


@pytest.mark.parametrize("status, fragment", [
    (404, 'No data'),
    (429, 'rate limit'),
    (503, 'server error'),
    (400, 'Bad request'),
])
def test_http_errors_become_results(status, fragment):
    result = asyncio.run(_source(lambda r: httpx.Response(status)).fetch('DEU', 'GDP'))
    assert not result.is_valid
    assert fragment in result.error


def test_invalid_json_and_empty_list():
    bad = asyncio.run(_source(lambda r: httpx.Response(200, content=b'not json')).fetch('DEU', 'GDP'))
    assert 'Invalid JSON' in bad.error

    empty = asyncio.run(_source(lambda r: httpx.Response(200, json=[])).fetch('DEU', 'GDP'))
    assert 'No data' in empty.error


def test_transport_failure_becomes_result():
    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    result = asyncio.run(_source(handler).fetch('DEU', 'GDP'))
    assert not result.is_valid
    assert 'Request failed' in result.error


def test_missing_codes_rejected_without_request():
    def handler(request):
        raise AssertionError('no request expected')

    result = asyncio.run(_source(handler).fetch('', 'GDP'))
    assert not result.is_valid


# ============================================================================
# Manager
# ============================================================================

class FakeSource(IndicatorDataSource):
    """Serves canned records and counts calls."""

    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)

    @property
    def name(self):
        return 'Fake'

    async def fetch(self, country_code, variable_code, years=None):
        self.calls.append((country_code, variable_code))
        if (country_code, variable_code) in self.failing:
            return IndicatorData(country_code, variable_code, error='boom')
        return IndicatorData(country_code, variable_code, records=[make_record(country_code, variable_code, {2020: 1.0})])


def test_fetch_selection_covers_every_pair(cache):
    manager = IndicatorSourceManager(FakeSource(), cache)
    results = asyncio.run(manager.fetch_selection(['DEU', 'FRA'], ['GDP', 'POP']))
    assert [r.id for r in results] == ['DEU:GDP', 'DEU:POP', 'FRA:GDP', 'FRA:POP']


def test_results_are_cached(cache):
    source = FakeSource()
    manager = IndicatorSourceManager(source, cache)
    asyncio.run(manager.fetch('DEU', 'GDP', [2020]))
    asyncio.run(manager.fetch('DEU', 'GDP', [2020]))
    assert source.calls == [('DEU', 'GDP')]


def test_failed_pairs_are_skipped(cache):
    source = FakeSource(failing=[('FRA', 'GDP')])
    manager = IndicatorSourceManager(source, cache)
    records = asyncio.run(manager.fetch_records(['DEU', 'FRA'], ['GDP']))

    assert [r['countryCode'] for r in records] == ['DEU']
    assert cache.get_data('FRA', 'GDP') is None


def test_empty_selection_fetches_nothing(cache):
    source = FakeSource()
    manager = IndicatorSourceManager(source, cache)
    assert asyncio.run(manager.fetch_records([], ['GDP'])) == []
    assert source.calls == []
