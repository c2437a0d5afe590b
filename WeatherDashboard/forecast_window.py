"""Forecast windowing - align daily records to a 7-day calendar and find the 24h hourly slice."""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dashboard_clock import Clock
from forecast_data import DailyForecast, HourlyForecast, format_number
from weather_icons import NOT_AVAILABLE_ICON, icon_path, not_available_icon, weather_icon_name

NOT_AVAILABLE = "NA"
DAYS_IN_WINDOW = 7
HOURLY_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class DaySummary:
    """Display values for one day of the 7-day window."""
    min_temp: str = NOT_AVAILABLE
    max_temp: str = NOT_AVAILABLE
    icon: str = NOT_AVAILABLE_ICON
    name: str = NOT_AVAILABLE
    sunrise_time: str = NOT_AVAILABLE
    sunset_time: str = NOT_AVAILABLE


def _format_temperature(value: Optional[float]) -> str:
    return NOT_AVAILABLE if value is None else format_number(value)


def _format_clock_time(value: Optional[datetime]) -> str:
    return NOT_AVAILABLE if value is None else value.strftime("%H:%M")


class DailyWindowMapper:
    """Maps arbitrary daily records onto the fixed window [today, today+6]."""

    def __init__(self, icons_dir: str):
        self.icons_dir = icons_dir

    @staticmethod
    def build_window(today: date) -> List[date]:
        return [today + timedelta(days=offset) for offset in range(DAYS_IN_WINDOW)]

    @staticmethod
    def map(records: Iterable[DailyForecast], window: Sequence[date]) -> Dict[date, DailyForecast]:
        """
        Index daily records by date, keeping only dates inside `window`.

        Records without a date are dropped; a later record for the same
        date replaces an earlier one.
        """
        wanted = set(window)
        mapping: Dict[date, DailyForecast] = {}
        for record in records:
            if record.date is None:
                logging.debug("Dropping daily forecast without a date")
                continue
            if record.date not in wanted:
                logging.debug(f"Dropping daily forecast outside the window: {record.date}")
                continue
            mapping[record.date] = record
        return mapping

    def assign(
        self,
        window: Sequence[date],
        mapping: Dict[date, DailyForecast],
    ) -> Tuple[List[DaySummary], int]:
        """
        Build one summary per window date.

        Args:
            window: The 7 window dates, index 0 is today
            mapping: Records by date, from `map`

        Returns:
            Tuple of (summaries in window order, number of missing dates)
        """
        summaries = []
        missing_count = 0
        for day_index, expected_date in enumerate(window):
            forecast = mapping.get(expected_date)
            if forecast is None:
                missing_count += 1
                logging.warning(f"Missing daily forecast for date: {expected_date} (day_index: {day_index})")
                summaries.append(DaySummary(icon=not_available_icon(self.icons_dir)))
                continue

            min_temp = _format_temperature(forecast.temp_min)
            max_temp = _format_temperature(forecast.temp_max)
            logging.debug(f"Day {day_index} ({expected_date}) - Max {max_temp}°, Min {min_temp}°")

            sunrise = sunset = NOT_AVAILABLE
            if day_index == 0 and forecast.astronomical is not None:
                sunrise = _format_clock_time(forecast.astronomical.sunrise_time)
                sunset = _format_clock_time(forecast.astronomical.sunset_time)

            summaries.append(DaySummary(
                min_temp=min_temp,
                max_temp=max_temp,
                icon=icon_path(self.icons_dir, weather_icon_name(forecast.weather_code)),
                sunrise_time=sunrise,
                sunset_time=sunset,
            ))
        return summaries, missing_count


class HourlyWindowFinder:
    """Locates the 24h UTC slice of hourly records that starts at the current hour."""

    @staticmethod
    def find(
        records: Sequence[HourlyForecast],
        clock: Clock,
    ) -> Optional[Tuple[datetime, datetime]]:
        """
        Find the hourly forecast window.

        The window starts at the first record at or after the current UTC
        hour. If that record already belongs to the next UTC day there is a
        gap over midnight, and no window is returned rather than a window
        whose first hour is not "now".

        Args:
            records: Hourly records sorted ascending by time
            clock: Source of the current time

        Returns:
            (start, start + 24h) in UTC, or None
        """
        current_hour = clock.now_utc().replace(minute=0, second=0, microsecond=0)
        today_utc = current_hour.date()
        logging.debug(f"Current hour (UTC): {current_hour:%Y-%m-%d %H:%M} (date: {today_utc})")

        start = next((record.time for record in records if record.time >= current_hour), None)
        if start is None:
            return None

        start_date = start.astimezone(current_hour.tzinfo).date()
        if start_date != today_utc:
            logging.warning(f"First available forecast is from {start_date} but expected {today_utc}")
            return None

        return start, start + HOURLY_WINDOW
