"""Forecast domain model - pure data structures independent of any API."""
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


KMH_TO_MPH = 0.621371
KMH_TO_KNOTS = 0.539957


def format_number(value: float, decimals: int = 0) -> str:
    """
    Format a numeric value for display.

    Rounds half away from zero (not banker's rounding) and drops the
    fractional part when it rounds to a whole number, so 3.0 -> "3".

    Args:
        value: Value to format
        decimals: Number of decimal places to keep

    Returns:
        Display string
    """
    factor = 10 ** decimals
    scaled = math.floor(abs(value) * factor + 0.5) / factor
    rounded = math.copysign(scaled, value) if scaled else 0.0
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{decimals}f}"


@dataclass(frozen=True)
class Astronomical:
    """Sun times for a day, already in local wall-clock time (naive)."""
    sunrise_time: Optional[datetime] = None
    sunset_time: Optional[datetime] = None


@dataclass(frozen=True)
class DailyForecast:
    """One day of forecast data."""
    date: Optional[date]
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    astronomical: Optional[Astronomical] = None
    weather_code: Optional[int] = None  # WMO code, selects the icon


@dataclass(frozen=True)
class Wind:
    """Wind for one hour. Speeds are km/h."""
    speed: float = 0.0
    gust: float = 0.0
    direction: Optional[float] = None  # degrees

    def get_speed(self, use_gust: bool) -> float:
        return self.gust if use_gust else self.speed

    @staticmethod
    def convert_speed(speed_kmh: float, unit: str) -> float:
        """
        Convert a km/h speed to the configured display unit.

        Args:
            speed_kmh: Speed in km/h
            unit: One of "km/h", "mph", "knots"

        Returns:
            Speed in the requested unit
        """
        if unit == "mph":
            return speed_kmh * KMH_TO_MPH
        if unit == "knots":
            return speed_kmh * KMH_TO_KNOTS
        return speed_kmh

    def get_speed_in_unit(self, use_gust: bool, unit: str) -> float:
        return self.convert_speed(self.get_speed(use_gust), unit)


@dataclass(frozen=True)
class Precipitation:
    """Precipitation for one hour: chance in percent, amount range in mm."""
    chance: Optional[int] = None
    amount_min: Optional[float] = None
    amount_max: Optional[float] = None

    def calculate_median(self) -> float:
        """Median of the amount distribution (0 when no bounds are known)."""
        bounds = [v for v in (self.amount_min, self.amount_max) if v is not None]
        if not bounds:
            return 0.0
        return sum(bounds) / len(bounds)


@dataclass(frozen=True)
class HourlyForecast:
    """One hour of forecast data. `time` is a timezone-aware UTC timestamp."""
    time: datetime
    temperature: float
    apparent_temperature: float
    wind: Wind
    precipitation: Precipitation
    uv_index: float = 0.0
    relative_humidity: float = 0.0
    weather_code: Optional[int] = None
    is_night: bool = False
