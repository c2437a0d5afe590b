"""Dashboard configuration - loaded once from the environment (and .env) into an immutable value."""
import logging
import os
import re
from dataclasses import dataclass, field, fields
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

TEMP_UNITS = ("C", "F")
WIND_SPEED_UNITS = ("km/h", "mph", "knots")
NAMED_COLOURS = {
    "black", "white", "red", "green", "blue", "yellow", "orange", "purple", "none",
}
HEX_COLOUR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class ApiSettings:
    latitude: float
    longitude: float
    provider: str = "open_meteo"
    timeout: int = 10


@dataclass(frozen=True)
class Colours:
    background_colour: str = "white"
    text_colour: str = "black"
    x_axis_colour: str = "black"
    y_left_axis_colour: str = "red"
    y_right_axis_colour: str = "blue"
    actual_temp_colour: str = "red"
    feels_like_colour: str = "green"
    rain_colour: str = "blue"


@dataclass(frozen=True)
class RenderOptions:
    temp_unit: str = "C"
    wind_speed_unit: str = "km/h"
    date_format: str = "%A, %d %B"
    time_format: str = "%H:%M"
    use_gust_instead_of_wind: bool = False
    x_axis_always_at_min: bool = False


@dataclass(frozen=True)
class PathSettings:
    icons_dir: str = os.path.join(BASE_DIR, "static", "icons")
    template_path: str = os.path.join(BASE_DIR, "templates", "dashboard.svg")
    output_svg_path: str = os.path.join(BASE_DIR, "output", "dashboard.svg")
    status_file: str = os.path.join(BASE_DIR, "output", "last_run_status.json")


@dataclass(frozen=True)
class DashboardSettings:
    """Read-only configuration passed explicitly into the dashboard pipeline."""
    api: ApiSettings
    colours: Colours = field(default_factory=Colours)
    render_options: RenderOptions = field(default_factory=RenderOptions)
    paths: PathSettings = field(default_factory=PathSettings)


def is_valid_colour(value: str) -> bool:
    return value.lower() in NAMED_COLOURS or bool(HEX_COLOUR.match(value))


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None or raw == "":
        return default
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise SystemExit(f"Invalid boolean for {name}: {raw!r}")


def _parse_coordinate(name: str, raw: Optional[str], limit: float) -> float:
    if not raw:
        raise SystemExit(f"Missing {name} in environment")
    try:
        value = float(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid coordinates: {exc}") from exc
    if not -limit <= value <= limit:
        raise SystemExit(f"{name} must be between {-limit} and {limit}, got {value}")
    return value


def _load_colours() -> Colours:
    defaults = Colours()
    values = {}
    for colour_field in fields(Colours):
        name = colour_field.name
        env_name = "DASHBOARD_" + name.upper()
        value = os.getenv(env_name, getattr(defaults, name)).strip()
        if not is_valid_colour(value):
            raise SystemExit(f"Invalid colour for {env_name}: {value!r}")
        values[name] = value
    return Colours(**values)


def _load_render_options() -> RenderOptions:
    defaults = RenderOptions()
    temp_unit = os.getenv("DASHBOARD_TEMP_UNIT", defaults.temp_unit).strip().upper()
    if temp_unit not in TEMP_UNITS:
        raise SystemExit(f"Invalid DASHBOARD_TEMP_UNIT: {temp_unit!r} (expected one of {TEMP_UNITS})")
    wind_unit = os.getenv("DASHBOARD_WIND_SPEED_UNIT", defaults.wind_speed_unit).strip()
    if wind_unit not in WIND_SPEED_UNITS:
        raise SystemExit(f"Invalid DASHBOARD_WIND_SPEED_UNIT: {wind_unit!r} (expected one of {WIND_SPEED_UNITS})")
    return RenderOptions(
        temp_unit=temp_unit,
        wind_speed_unit=wind_unit,
        date_format=os.getenv("DASHBOARD_DATE_FORMAT", defaults.date_format),
        time_format=os.getenv("DASHBOARD_TIME_FORMAT", defaults.time_format),
        use_gust_instead_of_wind=_parse_bool(
            "DASHBOARD_USE_GUST_INSTEAD_OF_WIND",
            os.getenv("DASHBOARD_USE_GUST_INSTEAD_OF_WIND"),
            defaults.use_gust_instead_of_wind,
        ),
        x_axis_always_at_min=_parse_bool(
            "DASHBOARD_X_AXIS_ALWAYS_AT_MIN",
            os.getenv("DASHBOARD_X_AXIS_ALWAYS_AT_MIN"),
            defaults.x_axis_always_at_min,
        ),
    )


def _load_paths() -> PathSettings:
    defaults = PathSettings()
    return PathSettings(
        icons_dir=os.getenv("DASHBOARD_ICONS_DIR", defaults.icons_dir),
        template_path=os.getenv("DASHBOARD_TEMPLATE_PATH", defaults.template_path),
        output_svg_path=os.getenv("DASHBOARD_OUTPUT_SVG_PATH", defaults.output_svg_path),
        status_file=os.getenv("DASHBOARD_STATUS_FILE", defaults.status_file),
    )


def load_settings() -> DashboardSettings:
    """
    Load dashboard settings from environment variables (after reading .env).

    Returns:
        DashboardSettings

    Raises:
        SystemExit: If a required value is missing or a value is invalid
    """
    load_dotenv()

    provider = os.getenv("DASHBOARD_PROVIDER", "open_meteo").strip().lower()
    if provider != "open_meteo":
        raise SystemExit(f"Unsupported DASHBOARD_PROVIDER: {provider!r}")
    try:
        timeout = int(os.getenv("DASHBOARD_HTTP_TIMEOUT", "10"))
    except ValueError as exc:
        raise SystemExit(f"Invalid DASHBOARD_HTTP_TIMEOUT: {exc}") from exc

    api = ApiSettings(
        latitude=_parse_coordinate("DASHBOARD_LAT", os.getenv("DASHBOARD_LAT"), 90.0),
        longitude=_parse_coordinate("DASHBOARD_LON", os.getenv("DASHBOARD_LON"), 180.0),
        provider=provider,
        timeout=timeout,
    )
    settings = DashboardSettings(
        api=api,
        colours=_load_colours(),
        render_options=_load_render_options(),
        paths=_load_paths(),
    )
    log_settings(settings)
    return settings


def log_settings(settings: DashboardSettings) -> None:
    logging.info(
        "Configuration loaded: provider=%s lat=%s lon=%s",
        settings.api.provider,
        settings.api.latitude,
        settings.api.longitude,
    )
    options = settings.render_options
    logging.info(
        "Render options: temp_unit=%s wind_unit=%s date_format=%r time_format=%r gust=%s x_axis_at_min=%s",
        options.temp_unit,
        options.wind_speed_unit,
        options.date_format,
        options.time_format,
        options.use_gust_instead_of_wind,
        options.x_axis_always_at_min,
    )
    logging.debug("Paths: %s", settings.paths)
    logging.debug("Colours: %s", settings.colours)
