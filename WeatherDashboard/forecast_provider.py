"""Forecast provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from dashboard_diagnostics import Diagnostic
from forecast_data import DailyForecast, HourlyForecast

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class FetchResult(Generic[RecordT]):
    """Records from a provider, plus a warning when they are not fresh."""
    records: List[RecordT] = field(default_factory=list)
    warning: Optional[Diagnostic] = None


class ForecastProviderBase(ABC):
    """Abstract base class for forecast data providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def fetch_daily_forecast(self) -> FetchResult[DailyForecast]:
        """
        Fetch the daily forecast, today first.

        Returns:
            FetchResult of DailyForecast records

        Raises:
            ForecastProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def fetch_hourly_forecast(self) -> FetchResult[HourlyForecast]:
        """
        Fetch the hourly forecast, sorted ascending by UTC time.

        Returns:
            FetchResult of HourlyForecast records

        Raises:
            ForecastProviderError: If the provider fails to fetch data
        """
        pass


class ForecastProviderError(Exception):
    """Exception raised when a forecast provider fails."""
    pass


class ProviderConnectionError(ForecastProviderError):
    """The provider could not be reached at all (DNS, refused, timeout)."""
    pass
