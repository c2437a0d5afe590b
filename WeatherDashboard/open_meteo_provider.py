"""Open-Meteo forecast API provider implementation."""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from forecast_data import Astronomical, DailyForecast, HourlyForecast, Precipitation, Wind
from forecast_provider import (
    FetchResult,
    ForecastProviderBase,
    ForecastProviderError,
    ProviderConnectionError,
)

DAILY_VARIABLES = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "sunrise",
    "sunset",
]

HOURLY_VARIABLES = [
    "temperature_2m",
    "apparent_temperature",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
    "precipitation_probability",
    "precipitation",
    "uv_index",
    "relative_humidity_2m",
    "weather_code",
    "is_day",
]


def _parse_local_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _column(block: Dict[str, Any], name: str, index: int) -> Any:
    values = block.get(name) or []
    return values[index] if index < len(values) else None


class OpenMeteoProvider(ForecastProviderBase):
    """
    Forecast provider using the Open-Meteo forecast API.

    No API key is needed: https://open-meteo.com/en/docs
    Daily data is requested in the location's own timezone so dates and
    sun times are local; hourly data is requested in GMT so times are UTC.
    """

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(
        self,
        lat: float,
        lon: float,
        temp_unit: str = "C",
        timeout: int = 10,
    ):
        """
        Initialize Open-Meteo provider.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)
            temp_unit: "C" or "F"
            timeout: HTTP request timeout in seconds
        """
        self.lat = lat
        self.lon = lon
        self.temp_unit = temp_unit
        self.timeout = timeout

    @property
    def provider_name(self) -> str:
        return "Open-Meteo"

    def _base_params(self) -> Dict[str, Any]:
        return {
            "latitude": self.lat,
            "longitude": self.lon,
            "temperature_unit": "fahrenheit" if self.temp_unit == "F" else "celsius",
            "wind_speed_unit": "kmh",
            "precipitation_unit": "mm",
        }

    def fetch_daily_forecast(self) -> FetchResult[DailyForecast]:
        params = self._base_params()
        params.update({
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
            "forecast_days": 7,
        })
        data = self._request(params)
        try:
            records = self._parse_daily(data)
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse daily forecast: {e}", exc_info=True)
            raise ForecastProviderError(f"Failed to parse response: {str(e)}")
        logging.info(f"Parsed {len(records)} daily forecast records")
        return FetchResult(records=records)

    def fetch_hourly_forecast(self) -> FetchResult[HourlyForecast]:
        params = self._base_params()
        params.update({
            "hourly": ",".join(HOURLY_VARIABLES),
            "timezone": "GMT",
            "forecast_days": 3,
        })
        data = self._request(params)
        try:
            records = self._parse_hourly(data)
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse hourly forecast: {e}", exc_info=True)
            raise ForecastProviderError(f"Failed to parse response: {str(e)}")
        logging.info(f"Parsed {len(records)} hourly forecast records")
        return FetchResult(records=records)

    def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            logging.info(f"Making Open-Meteo API request: {self.BASE_URL}")
            logging.debug(f"Request parameters: {params}")

            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")
            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")
            return data

        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logging.error(f"Could not reach Open-Meteo: {e}")
            raise ProviderConnectionError(f"Network error: {str(e)}")
        except ValueError as e:
            # requests' JSONDecodeError is both a ValueError and a RequestException
            logging.error(f"API response is not valid JSON: {e}")
            raise ForecastProviderError(f"Failed to parse response: {str(e)}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise ForecastProviderError(f"Network error: {str(e)}")

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from an Open-Meteo error response."""
        try:
            error_data = response.json()
        except ValueError:
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise ForecastProviderError(f"HTTP {response.status_code}: {response.text[:200]}")

        logging.error(f"Open-Meteo API error response: {error_data}")
        reason = error_data.get("reason", "Unknown error")
        raise ForecastProviderError(f"Open-Meteo API error {response.status_code}: {reason}")

    def _parse_daily(self, data: Dict[str, Any]) -> List[DailyForecast]:
        daily = data.get("daily")
        if not daily:
            raise ForecastProviderError("Response missing 'daily' block")

        records = []
        for index, day in enumerate(daily["time"]):
            sunrise = _parse_local_datetime(_column(daily, "sunrise", index))
            sunset = _parse_local_datetime(_column(daily, "sunset", index))
            astronomical = None
            if sunrise is not None or sunset is not None:
                astronomical = Astronomical(sunrise_time=sunrise, sunset_time=sunset)

            records.append(DailyForecast(
                date=date.fromisoformat(day) if day else None,
                temp_min=_column(daily, "temperature_2m_min", index),
                temp_max=_column(daily, "temperature_2m_max", index),
                astronomical=astronomical,
                weather_code=_column(daily, "weather_code", index),
            ))
        return records

    def _parse_hourly(self, data: Dict[str, Any]) -> List[HourlyForecast]:
        hourly = data.get("hourly")
        if not hourly:
            raise ForecastProviderError("Response missing 'hourly' block")

        records = []
        for index, timestamp in enumerate(hourly["time"]):
            temperature = _column(hourly, "temperature_2m", index)
            if temperature is None:
                logging.debug(f"Skipping hourly record without temperature at {timestamp}")
                continue
            apparent = _column(hourly, "apparent_temperature", index)
            amount = _column(hourly, "precipitation", index)
            is_day = _column(hourly, "is_day", index)

            records.append(HourlyForecast(
                time=datetime.fromisoformat(timestamp).replace(tzinfo=timezone.utc),
                temperature=temperature,
                apparent_temperature=temperature if apparent is None else apparent,
                wind=Wind(
                    speed=_column(hourly, "wind_speed_10m", index) or 0.0,
                    gust=_column(hourly, "wind_gusts_10m", index) or 0.0,
                    direction=_column(hourly, "wind_direction_10m", index),
                ),
                precipitation=Precipitation(
                    chance=_column(hourly, "precipitation_probability", index),
                    amount_min=amount,
                    amount_max=amount,
                ),
                uv_index=_column(hourly, "uv_index", index) or 0.0,
                relative_humidity=_column(hourly, "relative_humidity_2m", index) or 0.0,
                weather_code=_column(hourly, "weather_code", index),
                is_night=is_day == 0,
            ))
        records.sort(key=lambda record: record.time)
        return records
