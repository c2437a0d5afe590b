"""Tests for the dashboard context pipeline."""
import logging
import os
import time
import pytest
from datetime import date, datetime, timedelta, timezone
from dashboard_clock import FixedClock
from dashboard_context import (
    FONT_STYLE_ITALIC,
    FONT_STYLE_NORMAL,
    MISSING_DAYS_DETAILS,
    NO_HOURLY_DATA_DETAILS,
    Context,
    ContextBuilder,
    pick_today_or_tomorrow,
)
from dashboard_diagnostics import Diagnostic, DiagnosticKind
from dashboard_settings import ApiSettings, DashboardSettings, PathSettings, RenderOptions
from forecast_data import Astronomical, DailyForecast, HourlyForecast, Precipitation, Wind
from hourly_graph import GraphPaths, GraphRendererBase
from template_renderer import render_template

ICONS_DIR = "icons"
BRISBANE = timezone(timedelta(hours=10))
# 22:00 UTC on the 9th is 08:00 on Friday the 10th in Brisbane
NOW_UTC = datetime(2025, 10, 9, 22, 0, tzinfo=timezone.utc)
TODAY_LOCAL = date(2025, 10, 10)
# Local midnight between "today" and "tomorrow" in UTC
DAY_END_UTC = datetime(2025, 10, 10, 14, 0, tzinfo=timezone.utc)
TEMPLATE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates", "dashboard.svg")


class RecordingRenderer(GraphRendererBase):
    """Graph renderer that keeps what it was asked to draw."""

    def __init__(self):
        self.curves = None
        self.start_hour = None

    def render(self, curves, start_hour):
        self.curves = curves
        self.start_hour = start_hour
        return GraphPaths(actual_temp_curve_data="M 0 0 L 1 1")


def _settings(**render_options):
    return DashboardSettings(
        api=ApiSettings(latitude=-27.47, longitude=153.03),
        render_options=RenderOptions(**render_options),
        paths=PathSettings(icons_dir=ICONS_DIR),
    )


def _daily(days=7):
    sun = Astronomical(
        sunrise_time=datetime(2025, 10, 10, 5, 31),
        sunset_time=datetime(2025, 10, 10, 17, 58),
    )
    return [
        DailyForecast(
            date=TODAY_LOCAL + timedelta(days=offset),
            temp_min=12.0 + offset,
            temp_max=24.6 + offset,
            astronomical=sun,
            weather_code=1,
        )
        for offset in range(days)
    ]


def _hour(moment, uv_index=3.0, humidity=60.0, wind_speed=10.0):
    return HourlyForecast(
        time=moment,
        temperature=18.4,
        apparent_temperature=17.6,
        wind=Wind(speed=wind_speed, gust=wind_speed * 2),
        precipitation=Precipitation(chance=40, amount_min=0.1, amount_max=0.3),
        uv_index=uv_index,
        relative_humidity=humidity,
        weather_code=61,
    )


def _hourly(step=timedelta(hours=1), count=72, **values):
    start = datetime(2025, 10, 9, 0, 0, tzinfo=timezone.utc)
    return [_hour(start + step * index, **values) for index in range(count)]


@pytest.fixture
def clock():
    return FixedClock(NOW_UTC, local_tz=BRISBANE)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def builder(clock, renderer):
    return ContextBuilder(_settings(), clock, renderer)


def test_pick_today_or_tomorrow():
    """Test that today wins only when strictly greater."""
    assert pick_today_or_tomorrow(8.0, 5.0) == (8.0, FONT_STYLE_NORMAL)
    assert pick_today_or_tomorrow(5.0, 8.0) == (8.0, FONT_STYLE_ITALIC)
    assert pick_today_or_tomorrow(5.0, 5.0) == (5.0, FONT_STYLE_ITALIC)


def test_seed_context(builder):
    """Test seeded colours, units and neutral defaults."""
    context = builder.seed()

    assert context.background_colour == "white"
    assert context.rain_colour == "blue"
    assert context.temp_unit == "C"
    assert context.current_wind_speed_unit == "km/h"
    assert context.current_hour_actual_temp == "NA"
    assert context.current_hour_weather_icon == os.path.join(ICONS_DIR, "not-available.svg")
    assert context.sunrise_icon == os.path.join(ICONS_DIR, "sunrise.svg")
    assert context.diagnostic_visibility == "hidden"
    assert context.diagnostics == ()


def test_full_build(builder, renderer):
    """Test a complete build with all data present."""
    context = builder.build(_daily(), _hourly())

    assert context.diagnostics == ()
    assert context.diagnostic_visibility == "hidden"
    # Daily
    assert context.daily[0].max_temp == "25"
    assert context.daily[6].min_temp == "18"
    assert context.daily[1].icon == os.path.join(ICONS_DIR, "partly-cloudy-day.svg")
    assert context.sunrise_time == "05:31"
    assert context.sunset_time == "17:58"
    assert context.day_names == ("Today", "Sat", "Sun", "Mon", "Tue", "Wed", "Thu")
    # Current hour
    assert context.current_day_date == "Friday, 10 October"
    assert context.current_day_time == "08:00"
    assert context.current_hour_actual_temp == "18"
    assert context.current_hour_feels_like == "18"
    assert context.current_hour_weather_icon == os.path.join(ICONS_DIR, "rain.svg")
    assert context.current_hour_rain_amount == "0.2"
    assert context.current_hour_rain_measure_icon == os.path.join(ICONS_DIR, "raindrop-measure.svg")
    assert context.current_hour_wind_speed == "10"
    assert context.current_hour_wind_icon == os.path.join(ICONS_DIR, "wind-beaufort-2.svg")
    assert context.current_hour_uv_index == "3"
    assert context.current_hour_relative_humidity == "60"
    assert context.current_hour_relative_humidity_icon == os.path.join(ICONS_DIR, "humidity.svg")
    # Graph
    assert renderer.start_hour == 8
    assert renderer.curves.temperature == [18.4] * 24
    assert renderer.curves.rain_chance == [40] * 24
    assert context.actual_temp_curve_data == "M 0 0 L 1 1"
    assert context.graph_width == "600"
    assert context.graph_height == "300"


def test_rain_total_sums_the_24h_window(builder):
    """Test that total rain covers exactly the 24 windowed hours."""
    context = builder.build(_daily(), _hourly())

    # 24 hours of 0.2 mm
    assert context.total_rain_today == "4.8"


def test_table_maxima_tie_prefers_tomorrow_in_italics(builder):
    """Test that equal today/tomorrow maxima show tomorrow's value in italics."""
    context = builder.build(_daily(), _hourly())

    assert context.max_uv_index == "3"
    assert context.max_uv_index_font_style == FONT_STYLE_ITALIC
    assert context.max_relative_humidity_font_style == FONT_STYLE_ITALIC
    assert context.max_gust_speed_font_style == FONT_STYLE_ITALIC


def test_table_maxima_today_wins(builder):
    """Test that a strictly larger value in today's slice is shown normally."""
    records = [
        _hour(record.time, uv_index=9.0 if NOW_UTC <= record.time < DAY_END_UTC else 4.0)
        for record in _hourly()
    ]

    context = builder.build(_daily(), records)

    assert context.max_uv_index == "9"
    assert context.max_uv_index_font_style == FONT_STYLE_NORMAL


def test_table_maxima_tomorrow_wins(builder):
    records = [
        _hour(record.time, humidity=95.0 if record.time >= DAY_END_UTC else 50.0)
        for record in _hourly()
    ]

    context = builder.build(_daily(), records)

    assert context.max_relative_humidity == "95"
    assert context.max_relative_humidity_font_style == FONT_STYLE_ITALIC


@pytest.fixture
def berlin_host_zone(monkeypatch):
    """Run with the host's local zone set to Europe/Berlin."""
    if not hasattr(time, "tzset") or not os.path.exists("/usr/share/zoneinfo/Europe/Berlin"):
        pytest.skip("needs tzset and the Europe/Berlin zone")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_today_slice_ends_at_local_midnight_across_dst_change(renderer, berlin_host_zone):
    """Test that the last hour before midnight still counts as today after clocks go back."""
    # 01:10 CEST on 26 October; clocks go back at 03:00, local midnight is 23:00 UTC
    clock = FixedClock(datetime(2025, 10, 25, 23, 10, tzinfo=timezone.utc))
    builder = ContextBuilder(_settings(), clock, renderer)
    start = datetime(2025, 10, 25, 23, 0, tzinfo=timezone.utc)
    late_evening = datetime(2025, 10, 26, 22, 0, tzinfo=timezone.utc)  # 23:00 CET
    records = [
        _hour(moment, uv_index=9.0 if moment == late_evening else 1.0)
        for moment in (start + timedelta(hours=offset) for offset in range(24))
    ]

    context = builder.build([], records)

    assert context.max_uv_index == "9"
    assert context.max_uv_index_font_style == FONT_STYLE_NORMAL


def test_wind_shown_in_configured_unit(clock, renderer):
    builder = ContextBuilder(_settings(wind_speed_unit="mph"), clock, renderer)

    context = builder.build(_daily(), _hourly(wind_speed=100.0))

    assert context.current_hour_wind_speed == "62"
    assert context.max_gust_speed == "62"
    assert context.current_wind_speed_unit == "mph"


def test_gust_instead_of_wind(clock, renderer):
    builder = ContextBuilder(_settings(use_gust_instead_of_wind=True), clock, renderer)

    context = builder.build(_daily(), _hourly(wind_speed=10.0))

    assert context.current_hour_wind_speed == "20"
    assert context.max_gust_speed == "20"


def test_empty_daily_input(builder, caplog):
    """Test that no daily data yields 7 NA days and an incomplete-data banner."""
    with caplog.at_level(logging.ERROR):
        context = builder.build([], _hourly())

    assert all(day.max_temp == "NA" and day.min_temp == "NA" for day in context.daily)
    assert context.sunrise_time == "NA"
    assert context.diagnostic_visibility == "visible"
    assert context.diagnostic_message == "Incomplete Data"
    assert context.diagnostics == (Diagnostic.incomplete_data(MISSING_DAYS_DETAILS.format(7)),)
    assert "Missing 7 day(s) of daily forecast data" in caplog.text
    # Day names come from the calendar, not the data
    assert context.day_names[1] == "Sat"
    # Hourly processing still ran
    assert context.current_hour_actual_temp == "18"


def test_partial_daily_input(builder):
    context = builder.build(_daily(days=5), _hourly())

    assert context.daily[4].max_temp == "29"
    assert context.daily[5].max_temp == "NA"
    assert context.diagnostics[0].details == MISSING_DAYS_DETAILS.format(2)


def test_no_hourly_data(builder, renderer):
    """Test that no usable hourly data leaves defaults and flags incomplete data."""
    context = builder.build(_daily(), [])

    assert context.current_hour_actual_temp == "NA"
    assert context.max_uv_index == "NA"
    assert context.total_rain_today == "NA"
    assert context.actual_temp_curve_data == ""
    assert renderer.curves is None
    assert context.diagnostics == (Diagnostic.incomplete_data(NO_HOURLY_DATA_DETAILS),)
    # Daily processing still ran
    assert context.daily[0].max_temp == "25"


def test_hourly_data_only_in_the_past(builder):
    records = _hourly(count=10)

    context = builder.build(_daily(), records)

    assert context.current_hour_actual_temp == "NA"
    assert context.diagnostics[0].kind == DiagnosticKind.INCOMPLETE_DATA


def test_extra_points_in_window_are_dropped(builder, renderer, caplog):
    """Test that more than 24 in-window points only fill the 24 curve slots."""
    with caplog.at_level(logging.WARNING):
        context = builder.build(_daily(), _hourly(step=timedelta(minutes=30), count=144))

    assert len(renderer.curves.temperature) == 24
    assert None not in renderer.curves.temperature
    assert "dropping 24 extra points" in caplog.text
    assert context.diagnostics == ()


def test_warnings_are_added_without_logging(builder, caplog):
    """Test that fetch warnings reach the banner but are not logged again."""
    warning = Diagnostic.no_internet("Using cached data: timed out")

    with caplog.at_level(logging.DEBUG):
        context = builder.build(_daily(), _hourly(), warnings=[warning])

    assert context.diagnostics == (warning,)
    assert context.diagnostic_message == "No Internet"
    assert context.diagnostic_visibility == "visible"
    assert "timed out" not in caplog.text


def test_validation_errors_come_before_warnings(builder):
    warning = Diagnostic.update_failed("previous run failed")

    context = builder.build([], [], warnings=[warning])

    assert [d.kind for d in context.diagnostics] == [
        DiagnosticKind.INCOMPLETE_DATA,
        DiagnosticKind.INCOMPLETE_DATA,
        DiagnosticKind.UPDATE_FAILED,
    ]
    assert context.diagnostic_message == "Incomplete Data"
    assert context.diagnostic_icons_svg.count("<image ") == 3


def test_builder_is_reusable(builder):
    """Test that one build does not leak diagnostics into the next."""
    builder.build([], [])

    context = builder.build(_daily(), _hourly())

    assert context.diagnostics == ()


def test_template_fields(builder):
    """Test the flattened field mapping."""
    fields = builder.build(_daily(), _hourly()).to_template_fields()

    assert "daily" not in fields
    assert "diagnostics" not in fields
    assert fields["day2_name"] == "Sat"
    assert fields["day7_maxtemp"] == "31"
    assert fields["day3_mintemp"] == "14"
    assert fields["day4_icon"] == os.path.join(ICONS_DIR, "partly-cloudy-day.svg")
    assert "day1_name" not in fields
    assert all(isinstance(value, str) for value in fields.values())


def test_template_fields_fill_the_bundled_template(builder):
    """Test every placeholder of the bundled template has a field."""
    with open(TEMPLATE_PATH, "r", encoding="utf-8") as f:
        template = f.read()

    svg = render_template(template, builder.build([], []).to_template_fields())

    assert "{ " not in svg
    assert 'visibility="visible"' in svg


def test_context_is_immutable():
    context = Context()

    with pytest.raises(AttributeError):
        context.temp_unit = "F"


def test_default_context_has_placeholder_icons():
    """Test that an unseeded context points every icon at a real image name."""
    fields = Context().to_template_fields()

    icon_fields = {name: value for name, value in fields.items() if name.endswith("_icon")}
    assert icon_fields
    assert all(value for value in icon_fields.values())
    assert fields["day2_icon"] == "not-available.svg"
    assert fields["current_hour_weather_icon"] == "not-available.svg"
    assert fields["sunrise_icon"] == "sunrise.svg"
