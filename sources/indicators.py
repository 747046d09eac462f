"""
Indicator Backend Source - REST API serving annual indicator series.

GET {base}/indicators?countryCode=DEU&variableCode=GDP&years=2019&years=2020
returns a JSON array of indicator records.
"""

import logging
from typing import List, Optional, Sequence

import httpx

from .base import IndicatorDataSource, IndicatorData
from config import config

logger = logging.getLogger(__name__)


# Module-level connection pool for HTTP connection reuse
_async_client: Optional[httpx.AsyncClient] = None


def get_async_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client with connection pooling."""
    global _async_client
    if _async_client is None or _async_client.is_closed:
        _async_client = httpx.AsyncClient(
            timeout=config.fetch_timeout,
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
                keepalive_expiry=30.0
            )
        )
    return _async_client


async def close_async_client() -> None:
    global _async_client
    if _async_client is not None and not _async_client.is_closed:
        await _async_client.aclose()
    _async_client = None


class IndicatorAPISource(IndicatorDataSource):
    """Data source for the indicator REST backend."""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self._base_url = (base_url or config.indicator_api_url).rstrip('/')
        self._client = client

    @property
    def name(self) -> str:
        return "Indicator API"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        return self._client or get_async_client()

    async def fetch(
        self,
        country_code: str,
        variable_code: str,
        years: Optional[Sequence[int]] = None,
    ) -> IndicatorData:
        """Fetch one country/variable series from the backend."""
        if not country_code or not variable_code:
            return IndicatorData(
                country_code=country_code or '',
                variable_code=variable_code or '',
                error="Country code and variable code are required",
            )

        params: List[tuple] = [
            ('countryCode', country_code),
            ('variableCode', variable_code),
        ]
        for year in years or ():
            params.append(('years', str(year)))

        url = f"{self._base_url}/indicators"
        try:
            resp = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Indicator fetch failed for {country_code}:{variable_code}: {e}")
            return IndicatorData(country_code, variable_code, error=f"Request failed: {e}")

        # Check HTTP status codes BEFORE parsing JSON
        if resp.status_code == 429:
            return IndicatorData(
                country_code, variable_code,
                error=f"Indicator API rate limit exceeded for {country_code}:{variable_code}. Please wait and retry."
            )
        if resp.status_code >= 500:
            return IndicatorData(
                country_code, variable_code,
                error=f"Indicator API server error ({resp.status_code}) for {country_code}:{variable_code}."
            )
        if resp.status_code == 404 or resp.status_code == 204:
            return IndicatorData(country_code, variable_code, error=f"No data for {country_code}:{variable_code}")
        if resp.status_code >= 400:
            return IndicatorData(
                country_code, variable_code,
                error=f"Bad request for {country_code}:{variable_code} ({resp.status_code})."
            )

        try:
            payload = resp.json()
        except ValueError as e:
            return IndicatorData(country_code, variable_code, error=f"Invalid JSON from indicator API: {e}")

        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, list):
            return IndicatorData(country_code, variable_code, error="Unexpected response shape from indicator API")

        records = [r for r in payload if isinstance(r, dict)]
        if not records:
            return IndicatorData(country_code, variable_code, error=f"No data for {country_code}:{variable_code}")

        # The backend answers with a list; only the first record is the requested series
        return IndicatorData(country_code, variable_code, records=records[:1])
