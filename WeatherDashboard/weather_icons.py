"""Icon selection for forecast values - pure functions returning SVG icon paths."""
import os
from typing import Optional

NOT_AVAILABLE_ICON = "not-available.svg"
SUNRISE_ICON = "sunrise.svg"
SUNSET_ICON = "sunset.svg"

# WMO weather interpretation codes (as used by Open-Meteo) -> icon base name.
# Icons with a day/night variant get a "-day"/"-night" suffix.
WMO_CODE_TO_ICON = {
    0: "clear",
    1: "partly-cloudy",
    2: "partly-cloudy",
    3: "overcast",
    45: "fog",
    48: "fog",
    51: "drizzle",
    53: "drizzle",
    55: "drizzle",
    56: "sleet",
    57: "sleet",
    61: "rain",
    63: "rain",
    65: "rain",
    66: "sleet",
    67: "sleet",
    71: "snow",
    73: "snow",
    75: "snow",
    77: "snow",
    80: "partly-cloudy-rain",
    81: "partly-cloudy-rain",
    82: "rain",
    85: "partly-cloudy-snow",
    86: "snow",
    95: "thunderstorms",
    96: "thunderstorms-rain",
    99: "thunderstorms-rain",
}

DAY_NIGHT_ICONS = {"clear", "partly-cloudy", "partly-cloudy-rain", "partly-cloudy-snow"}

# Upper bounds (km/h) of Beaufort forces 0..11; anything above is force 12
BEAUFORT_LIMITS_KMH = [1, 6, 12, 20, 29, 39, 50, 62, 75, 89, 103, 118]


def icon_path(icons_dir: str, name: str) -> str:
    return os.path.join(icons_dir, name)


def not_available_icon(icons_dir: str) -> str:
    return icon_path(icons_dir, NOT_AVAILABLE_ICON)


def weather_icon_name(code: Optional[int], is_night: bool = False) -> str:
    """
    Get the icon file name for a WMO weather code.

    Args:
        code: WMO weather code (None if the provider gave none)
        is_night: Whether to pick the night variant where one exists

    Returns:
        Icon file name, the not-available icon for unknown codes
    """
    if code is None:
        return NOT_AVAILABLE_ICON
    base = WMO_CODE_TO_ICON.get(code)
    if base is None:
        return NOT_AVAILABLE_ICON
    if base in DAY_NIGHT_ICONS:
        base = f"{base}-{'night' if is_night else 'day'}"
    return f"{base}.svg"


def beaufort_force(speed_kmh: float) -> int:
    for force, limit in enumerate(BEAUFORT_LIMITS_KMH):
        if speed_kmh < limit:
            return force
    return 12


def wind_icon_name(speed_kmh: float) -> str:
    return f"wind-beaufort-{beaufort_force(speed_kmh)}.svg"


def uv_index_icon_name(uv_index: float) -> str:
    level = min(max(int(round(uv_index)), 0), 11)
    if level == 0:
        return "uv-index.svg"
    return f"uv-index-{level}.svg"


def humidity_icon_name(relative_humidity: float) -> str:
    # Three bands: dry, comfortable, humid
    if relative_humidity < 30:
        return "humidity-low.svg"
    if relative_humidity < 70:
        return "humidity.svg"
    return "humidity-high.svg"


def rain_icon_name(amount_mm: float) -> str:
    if amount_mm <= 0:
        return "raindrop.svg"
    if amount_mm < 2.5:
        return "raindrop-measure.svg"
    return "raindrops.svg"
