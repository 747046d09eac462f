"""
Indicator Source Manager - Fetch every series the current selection needs.

Provides one call that turns a selection (countries x variables x years)
into the raw record list the chart pipeline consumes.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from .base import IndicatorDataSource, IndicatorData
from .indicators import IndicatorAPISource
from cache import CacheManager, cache_manager

logger = logging.getLogger(__name__)


class IndicatorSourceManager:
    """
    Fetches selected series with caching and parallel requests.

    Failed pairs are logged and left out; a partially failed selection
    still charts whatever did arrive.
    """

    def __init__(self, source: Optional[IndicatorDataSource] = None, cache: Optional[CacheManager] = None):
        self._source = source or IndicatorAPISource()
        self._cache = cache or cache_manager

    @property
    def source(self) -> IndicatorDataSource:
        return self._source

    async def fetch(
        self,
        country_code: str,
        variable_code: str,
        years: Optional[Sequence[int]] = None,
    ) -> IndicatorData:
        """Fetch one pair, using cache if available."""
        years = list(years or [])

        cached = self._cache.get_data(country_code, variable_code, years)
        if cached:
            return IndicatorData(country_code, variable_code, records=cached)

        result = await self._source.fetch(country_code, variable_code, years)

        # Cache successful results
        if result.is_valid:
            self._cache.set_data(country_code, variable_code, years, result.records)

        return result

    async def fetch_selection(
        self,
        country_codes: Sequence[str],
        variable_codes: Sequence[str],
        years: Optional[Sequence[int]] = None,
    ) -> List[IndicatorData]:
        """
        Fetch every country x variable pair in parallel.

        Returns:
            IndicatorData per pair, countries outer, variables inner
        """
        pairs = [(c, v) for c in country_codes for v in variable_codes]
        if not pairs:
            return []

        tasks = [self.fetch(c, v, years) for c, v in pairs]
        return list(await asyncio.gather(*tasks))

    async def fetch_records(
        self,
        country_codes: Sequence[str],
        variable_codes: Sequence[str],
        years: Optional[Sequence[int]] = None,
    ) -> List[dict]:
        """Raw records for the selection; failed pairs are skipped."""
        records: List[dict] = []
        for result in await self.fetch_selection(country_codes, variable_codes, years):
            if result.is_valid:
                records.extend(result.records)
            else:
                logger.warning(f"Skipping {result.id}: {result.error}")
        return records


# Global instance
source_manager = IndicatorSourceManager()
