"""Tests for the two-tier cache."""

import time

from cache import CacheManager, LRUCache


def test_lru_evicts_least_recently_used():
    cache = LRUCache(max_size=2)
    cache.set('a', 1, ttl=60)
    cache.set('b', 2, ttl=60)
    cache.get('a')
    cache.set('c', 3, ttl=60)

    assert cache.get('a') == 1
    assert cache.get('b') is None
    assert cache.get('c') == 3
    assert len(cache) == 2


def test_expired_entries_are_misses():
    cache = LRUCache()
    cache.set('a', 1, ttl=-1)
    assert cache.get('a') is None
    assert len(cache) == 0


def test_sliding_ttl_extends_on_read():
    cache = LRUCache(sliding=True)
    cache.set('a', 1, ttl=60)
    before = cache._cache['a'].expires_at
    time.sleep(0.01)
    cache.get('a')
    assert cache._cache['a'].expires_at > before


def test_overwrite_and_delete():
    cache = LRUCache(max_size=2)
    cache.set('a', 1, ttl=60)
    cache.set('a', 2, ttl=60)
    assert cache.get('a') == 2
    assert len(cache) == 1
    assert cache.delete('a') is True
    assert cache.delete('a') is False


def test_stats():
    cache = LRUCache(max_size=10)
    cache.set('a', 1, ttl=60)
    cache.set('b', 1, ttl=-1)
    stats = cache.stats()
    assert stats['total_entries'] == 2
    assert stats['valid_entries'] == 1
    assert stats['expired_entries'] == 1
    assert stats['max_size'] == 10


def test_data_key_ignores_year_order():
    manager = CacheManager(max_size=10)
    manager.set_data('DEU', 'GDP', [2021, 2019], [{'countryCode': 'DEU'}])

    assert manager.get_data('DEU', 'GDP', [2019, 2021]) == [{'countryCode': 'DEU'}]
    assert manager.get_data('DEU', 'GDP', []) is None


def test_clear_data_keeps_sessions():
    manager = CacheManager(max_size=10)
    manager.set_data('DEU', 'GDP', [], [{}])
    manager.set_session('s1', 'state')

    manager.clear_data()
    assert manager.get_data('DEU', 'GDP') is None
    assert manager.get_session('s1') == 'state'

    manager.clear_all()
    assert manager.get_session('s1') is None
    assert set(manager.stats()) == {'data', 'sessions'}
