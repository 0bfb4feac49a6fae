"""Tests for biex.cache - shared construction of transforms."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest import mock

import pytest

from biex.cache import TransformCache
from biex.errors import ConstructionPreconditionError
from biex.transform import BiexConfig, Transform


@pytest.fixture
def cache():
    return TransformCache()


class TestGetOrConstruct:
    def test_identical_inputs_share_instance(self, cache):
        first = cache.get_or_construct(1, 1000)
        second = cache.get_or_construct(1, 1000)
        assert first is second

    def test_distinct_inputs_distinct_instances(self, cache):
        first = cache.get_or_construct(1, 1000)
        second = cache.get_or_construct(2, 1000)
        assert first is not second
        assert second.r_value == 2

    def test_report_range_is_part_of_key(self, cache):
        plain = cache.get_or_construct(1, 1000)
        ranged = cache.get_or_construct(1, 1000, report_range=True)
        assert plain is not ranged
        assert ranged.range_max == 1000
        assert plain.range_max is None

    def test_config_shares_instance(self, cache):
        by_config = cache.get_or_construct_config(BiexConfig(resolution=1, report_range=True), 1000)
        by_args = cache.get_or_construct(1, 1000, report_range=True)
        assert by_config is by_args

    def test_constructs_once(self, cache):
        with mock.patch("biex.cache.Transform", wraps=Transform) as constructor:
            cache.get_or_construct(1, 1000)
            cache.get_or_construct(1, 1000)
            cache.get_or_construct(1, 2000)
        assert constructor.call_count == 2

    def test_construction_error_not_cached(self, cache):
        with pytest.raises(ConstructionPreconditionError):
            cache.get_or_construct(1, -5)
        assert len(cache) == 0
        assert (1, -5, False) not in cache

    def test_concurrent_requests_construct_once(self, cache):
        with mock.patch("biex.cache.Transform", wraps=Transform) as constructor:
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda _: cache.get_or_construct(1, 1000), range(32)))
        assert constructor.call_count == 1
        assert all(result is results[0] for result in results)


class TestBookkeeping:
    def test_len_contains_clear(self, cache):
        cache.get_or_construct(1, 1000)
        cache.get_or_construct(2, 1000)
        assert len(cache) == 2
        assert (1, 1000, False) in cache
        assert (1, 1000, True) not in cache

        cache.clear()
        assert len(cache) == 0

    def test_unbounded_by_default(self, cache):
        for resolution in range(1, 20):
            cache.get_or_construct(resolution, 1000)
        assert cache.max_size is None
        assert len(cache) == 19

    def test_separate_caches_are_isolated(self):
        assert TransformCache().get_or_construct(1, 1000) is not TransformCache().get_or_construct(1, 1000)


class TestEviction:
    def test_evicts_least_recently_used(self):
        cache = TransformCache(max_size=2)
        first = cache.get_or_construct(1, 1000)
        cache.get_or_construct(2, 1000)

        # refresh the first entry, the second becomes the oldest
        assert cache.get_or_construct(1, 1000) is first
        cache.get_or_construct(3, 1000)

        assert len(cache) == 2
        assert (1, 1000, False) in cache
        assert (2, 1000, False) not in cache
        assert (3, 1000, False) in cache

    def test_evicted_entry_is_rebuilt(self):
        cache = TransformCache(max_size=1)
        first = cache.get_or_construct(1, 1000)
        cache.get_or_construct(2, 1000)
        rebuilt = cache.get_or_construct(1, 1000)
        assert rebuilt is not first
        assert rebuilt == first

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_invalid_max_size(self, max_size):
        with pytest.raises(ValueError, match="max_size"):
            TransformCache(max_size=max_size)
