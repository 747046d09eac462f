"""
Abstract interface for indicator backends.

The chart pipeline only needs raw records; anything that can produce
them for a (country, variable, years) selection can be a source.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class IndicatorData:
    """Result from fetching one country/variable pair."""

    country_code: str
    variable_code: str
    records: List[dict] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def id(self) -> str:
        return f"{self.country_code}:{self.variable_code}"

    @property
    def is_valid(self) -> bool:
        """Check if data was fetched successfully."""
        return self.error is None and len(self.records) > 0


class IndicatorDataSource(ABC):
    """Abstract base class for indicator backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this data source."""
        pass

    @abstractmethod
    async def fetch(
        self,
        country_code: str,
        variable_code: str,
        years: Optional[Sequence[int]] = None,
    ) -> IndicatorData:
        """
        Fetch the indicator series for one country and variable.

        Args:
            country_code: e.g. 'DEU'
            variable_code: Backend variable code
            years: Restrict to these years (None or empty = all years)

        Returns:
            IndicatorData with records or an error
        """
        pass
