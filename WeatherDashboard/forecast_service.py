"""Forecast service with caching, retries and stale-data fallback."""
import logging
import time
from typing import Callable, Dict, Optional

from dashboard_diagnostics import Diagnostic
from forecast_data import DailyForecast, HourlyForecast
from forecast_provider import (
    FetchResult,
    ForecastProviderBase,
    ForecastProviderError,
    ProviderConnectionError,
)


class ForecastService:
    """
    Service that wraps a forecast provider with caching and retries.

    Fresh results are cached per series (daily, hourly). When every retry
    fails and an earlier result exists, that result is returned with a
    warning diagnostic attached so the dashboard can show it is stale.
    """

    def __init__(
        self,
        provider: ForecastProviderBase,
        cache_ttl_seconds: int = 600,  # 10 minutes default
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0
    ):
        """
        Initialize forecast service.

        Args:
            provider: Forecast provider to use
            cache_ttl_seconds: How long to reuse a result before fetching again
            max_retries: Maximum number of attempts per fetch
            retry_delay_seconds: Base delay between retries (grows linearly)
        """
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        self._cached: Dict[str, FetchResult] = {}
        self._cache_timestamps: Dict[str, float] = {}

    def get_daily(self) -> FetchResult[DailyForecast]:
        return self._get("daily", self.provider.fetch_daily_forecast)

    def get_hourly(self) -> FetchResult[HourlyForecast]:
        return self._get("hourly", self.provider.fetch_hourly_forecast)

    def _get(self, series: str, fetch: Callable[[], FetchResult]) -> FetchResult:
        """
        Get the latest result for a series, using the cache if still fresh.

        Returns:
            FetchResult: Fresh or cached records; a stale fallback carries a warning

        Raises:
            ForecastProviderError: If all retries fail and no cache exists
        """
        current_time = time.time()

        cached = self._cached.get(series)
        if cached is not None:
            cache_age = current_time - self._cache_timestamps[series]
            if cache_age < self.cache_ttl_seconds:
                logging.debug(f"Using cached {series} forecast (age: {cache_age:.1f}s, TTL: {self.cache_ttl_seconds}s)")
                return cached
            logging.info(f"Cache expired for {series} forecast (age: {cache_age:.1f}s > TTL: {self.cache_ttl_seconds}s)")

        logging.info(f"Fetching {series} forecast from {self.provider.provider_name}...")
        last_error: Optional[ForecastProviderError] = None
        for attempt in range(self.max_retries):
            try:
                logging.debug(f"{series} fetch attempt {attempt + 1}/{self.max_retries}")
                result = fetch()
                logging.info(f"{series.capitalize()} forecast retrieved: {len(result.records)} records")
                self._cached[series] = result
                self._cache_timestamps[series] = current_time
                return result
            except ForecastProviderError as e:
                last_error = e
                logging.warning(f"{series} fetch attempt {attempt + 1} failed: {e}")
                # Don't retry on 4xx errors (bad request, etc.)
                if any(code in str(e) for code in ("400", "401", "403", "404")):
                    logging.error("Non-retryable error (4xx), stopping retries")
                    break
                if attempt < self.max_retries - 1:
                    retry_delay = self.retry_delay_seconds * (attempt + 1)
                    logging.info(f"Retrying in {retry_delay}s...")
                    time.sleep(retry_delay)

        if cached is not None:
            cache_age = current_time - self._cache_timestamps[series]
            logging.warning(f"Using cached {series} data due to: {last_error} (age: {cache_age:.1f}s)")
            return FetchResult(records=cached.records, warning=self._warning_for(last_error))

        logging.error(f"Failed to fetch {series} forecast after {self.max_retries} attempts, no cache available")
        raise ForecastProviderError(
            f"Failed to fetch {series} forecast after {self.max_retries} attempts: {last_error}"
        )

    @staticmethod
    def _warning_for(error: Optional[ForecastProviderError]) -> Diagnostic:
        details = f"Using cached data: {error}"
        if isinstance(error, ProviderConnectionError):
            return Diagnostic.no_internet(details)
        return Diagnostic.api_error(details)
