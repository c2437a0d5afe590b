"""Dashboard context - the flat field record handed to the template, and the pipeline that builds it."""
import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from dashboard_clock import Clock
from dashboard_diagnostics import Diagnostic, DiagnosticStack
from dashboard_settings import DashboardSettings
from forecast_data import DailyForecast, HourlyForecast, Wind, format_number
from forecast_window import (
    DAYS_IN_WINDOW,
    NOT_AVAILABLE,
    DailyWindowMapper,
    DaySummary,
    HourlyWindowFinder,
)
from hourly_graph import CURVE_LENGTH, GraphPaths, GraphRendererBase, HourlyCurves, SvgGraphRenderer
from weather_icons import (
    NOT_AVAILABLE_ICON,
    SUNRISE_ICON,
    SUNSET_ICON,
    humidity_icon_name,
    icon_path,
    not_available_icon,
    rain_icon_name,
    uv_index_icon_name,
    weather_icon_name,
    wind_icon_name,
)
from window_aggregation import max_between, sum_between

FONT_STYLE_NORMAL = "normal"
FONT_STYLE_ITALIC = "italic"
VISIBILITY_HIDDEN = "hidden"
VISIBILITY_VISIBLE = "visible"

MISSING_DAYS_DETAILS = "Missing {} day(s) of daily forecast data, using incomplete data"
NO_HOURLY_DATA_DETAILS = (
    "No hourly forecast data available, Could Not find a date later than the current date"
)

# Context attributes that are not template fields themselves
_STRUCTURED_FIELDS = ("daily", "day_names", "diagnostics")

PhaseResult = Tuple["Context", List[Diagnostic]]


@dataclass(frozen=True)
class Context:
    """
    Everything the dashboard template needs, as display strings.

    Daily values are kept as a 7-element tuple (index 0 is today) and only
    become day2_*..day7_* names in `to_template_fields`.
    """
    # colours
    background_colour: str = NOT_AVAILABLE
    text_colour: str = NOT_AVAILABLE
    x_axis_colour: str = NOT_AVAILABLE
    y_left_axis_colour: str = NOT_AVAILABLE
    y_right_axis_colour: str = NOT_AVAILABLE
    actual_temp_colour: str = NOT_AVAILABLE
    feels_like_colour: str = NOT_AVAILABLE
    rain_colour: str = NOT_AVAILABLE
    # table values
    max_uv_index: str = NOT_AVAILABLE
    max_uv_index_font_style: str = FONT_STYLE_NORMAL
    max_gust_speed: str = NOT_AVAILABLE
    max_gust_speed_font_style: str = FONT_STYLE_NORMAL
    max_relative_humidity: str = NOT_AVAILABLE
    max_relative_humidity_font_style: str = FONT_STYLE_NORMAL
    total_rain_today: str = NOT_AVAILABLE
    temp_unit: str = NOT_AVAILABLE
    current_wind_speed_unit: str = NOT_AVAILABLE
    # current hour
    current_hour_actual_temp: str = NOT_AVAILABLE
    current_hour_weather_icon: str = NOT_AVAILABLE_ICON
    current_hour_feels_like: str = NOT_AVAILABLE
    current_hour_wind_speed: str = NOT_AVAILABLE
    current_hour_wind_icon: str = NOT_AVAILABLE_ICON
    current_hour_uv_index: str = NOT_AVAILABLE
    current_hour_uv_index_icon: str = NOT_AVAILABLE_ICON
    current_hour_relative_humidity: str = NOT_AVAILABLE
    current_hour_relative_humidity_icon: str = NOT_AVAILABLE_ICON
    current_day_date: str = NOT_AVAILABLE
    current_day_time: str = NOT_AVAILABLE
    current_hour_rain_amount: str = NOT_AVAILABLE
    current_hour_rain_measure_icon: str = NOT_AVAILABLE_ICON
    sunrise_time: str = NOT_AVAILABLE
    sunset_time: str = NOT_AVAILABLE
    sunrise_icon: str = SUNRISE_ICON
    sunset_icon: str = SUNSET_ICON
    # graph
    graph_height: str = "300"
    graph_width: str = "600"
    actual_temp_curve_data: str = ""
    feel_like_curve_data: str = ""
    rain_curve_data: str = ""
    x_axis_path: str = ""
    x_axis_guideline_path: str = ""
    y_left_axis_path: str = ""
    x_labels: str = ""
    y_left_labels: str = ""
    y_right_axis_path: str = ""
    y_right_labels: str = ""
    uv_gradient: str = ""
    # banner
    diagnostic_message: str = NOT_AVAILABLE
    diagnostic_visibility: str = VISIBILITY_HIDDEN
    diagnostic_icons_svg: str = ""
    # structured
    daily: Tuple[DaySummary, ...] = tuple(DaySummary() for _ in range(DAYS_IN_WINDOW))
    day_names: Tuple[str, ...] = ("Today",) + (NOT_AVAILABLE,) * (DAYS_IN_WINDOW - 1)
    diagnostics: Tuple[Diagnostic, ...] = ()

    @classmethod
    def seed(cls, settings: DashboardSettings) -> "Context":
        """Context with configured colours and units, and neutral defaults everywhere else."""
        icons_dir = settings.paths.icons_dir
        na_icon = not_available_icon(icons_dir)
        colours = settings.colours
        return cls(
            background_colour=colours.background_colour,
            text_colour=colours.text_colour,
            x_axis_colour=colours.x_axis_colour,
            y_left_axis_colour=colours.y_left_axis_colour,
            y_right_axis_colour=colours.y_right_axis_colour,
            actual_temp_colour=colours.actual_temp_colour,
            feels_like_colour=colours.feels_like_colour,
            rain_colour=colours.rain_colour,
            temp_unit=settings.render_options.temp_unit,
            current_wind_speed_unit=settings.render_options.wind_speed_unit,
            current_hour_weather_icon=na_icon,
            current_hour_wind_icon=na_icon,
            current_hour_uv_index_icon=na_icon,
            current_hour_relative_humidity_icon=na_icon,
            current_hour_rain_measure_icon=na_icon,
            sunrise_icon=icon_path(icons_dir, SUNRISE_ICON),
            sunset_icon=icon_path(icons_dir, SUNSET_ICON),
            daily=tuple(DaySummary(icon=na_icon) for _ in range(DAYS_IN_WINDOW)),
        )

    def to_template_fields(self) -> Dict[str, str]:
        """Flatten into the name -> string mapping the template consumes."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _STRUCTURED_FIELDS
        }
        # Day 1 (today) is shown through the current-hour and sun fields
        for index in range(1, DAYS_IN_WINDOW):
            day = self.daily[index]
            prefix = f"day{index + 1}"
            result[f"{prefix}_mintemp"] = day.min_temp
            result[f"{prefix}_maxtemp"] = day.max_temp
            result[f"{prefix}_icon"] = day.icon
            result[f"{prefix}_name"] = self.day_names[index]
        return result


def pick_today_or_tomorrow(today: float, tomorrow: float) -> Tuple[float, str]:
    """
    Choose the figure to show for a today/tomorrow pair of maxima.

    Today's value only wins when strictly larger; otherwise tomorrow's value
    is shown in italics since it is a forecast rather than today's weather.
    """
    if today > tomorrow:
        return today, FONT_STYLE_NORMAL
    return tomorrow, FONT_STYLE_ITALIC


class ContextBuilder:
    """
    Builds a dashboard Context from already-fetched forecast series.

    Each phase takes the previous Context and returns a new one plus any
    diagnostics it found. The builder itself only holds read-only
    collaborators, so it can be reused across runs.
    """

    def __init__(
        self,
        settings: DashboardSettings,
        clock: Clock,
        graph_renderer: Optional[GraphRendererBase] = None,
    ):
        self.settings = settings
        self.clock = clock
        self.graph_renderer = graph_renderer or SvgGraphRenderer(
            text_colour=settings.colours.text_colour,
            x_axis_always_at_min=settings.render_options.x_axis_always_at_min,
        )
        self.daily_mapper = DailyWindowMapper(settings.paths.icons_dir)
        self.hourly_finder = HourlyWindowFinder()

    def build(
        self,
        daily_records: Sequence[DailyForecast],
        hourly_records: Sequence[HourlyForecast],
        warnings: Iterable[Diagnostic] = (),
    ) -> Context:
        """
        Run every phase and return the finished context.

        Args:
            daily_records: Daily forecast records in any order
            hourly_records: Hourly forecast records, ascending by time
            warnings: Diagnostics forwarded from the fetch stage (already logged)

        Returns:
            Fully populated Context
        """
        stack = DiagnosticStack(self.settings.paths.icons_dir)
        context = self.seed()

        context, found = self.with_daily_forecast(context, daily_records)
        for diagnostic in found:
            context = self.with_validation_error(context, stack, diagnostic)

        context = self.with_day_names(context)

        context, found = self.with_hourly_forecast(context, hourly_records)
        for diagnostic in found:
            context = self.with_validation_error(context, stack, diagnostic)

        for warning in warnings:
            context = self.with_warning(context, stack, warning)
        return context

    def seed(self) -> Context:
        return Context.seed(self.settings)

    def with_daily_forecast(self, context: Context, records: Sequence[DailyForecast]) -> PhaseResult:
        today = self.clock.now_local().date()
        logging.info(f"Processing daily forecast starting from: {today}")

        window = self.daily_mapper.build_window(today)
        mapping = self.daily_mapper.map(records, window)
        summaries, missing_count = self.daily_mapper.assign(window, mapping)

        context = replace(
            context,
            daily=tuple(summaries),
            sunrise_time=summaries[0].sunrise_time,
            sunset_time=summaries[0].sunset_time,
        )
        if missing_count:
            return context, [Diagnostic.incomplete_data(MISSING_DAYS_DETAILS.format(missing_count))]
        return context, []

    def with_day_names(self, context: Context) -> Context:
        """Weekday abbreviations for days 2..7 from the local calendar, whatever the data says."""
        now_local = self.clock.now_local()
        names = ["Today"] + [
            (now_local + timedelta(days=offset)).strftime("%a")
            for offset in range(1, DAYS_IN_WINDOW)
        ]
        return replace(context, day_names=tuple(names))

    def with_hourly_forecast(self, context: Context, records: Sequence[HourlyForecast]) -> PhaseResult:
        window = self.hourly_finder.find(records, self.clock)
        if window is None:
            return context, [Diagnostic.incomplete_data(NO_HOURLY_DATA_DETAILS)]

        utc_start, utc_end = window
        logging.info(f"24h UTC forecast window: {utc_start:%Y-%m-%d %H:%M} to {utc_end:%Y-%m-%d %H:%M}")
        local_start = self.clock.to_local(utc_start)
        local_end = self.clock.to_local(utc_end)
        day_end = self.clock.next_local_midnight(utc_start)
        logging.debug(f"Local forecast window: {local_start:%Y-%m-%d %H:%M %Z} to {local_end:%Y-%m-%d %H:%M %Z}")

        in_window = [record for record in records if local_start <= record.time < local_end]
        curves = HourlyCurves()
        for offset, record in enumerate(in_window):
            if offset >= CURVE_LENGTH:
                logging.warning(
                    f"More than {CURVE_LENGTH} hours of hourly forecast data, "
                    f"dropping {len(in_window) - CURVE_LENGTH} extra points"
                )
                break
            curves.set_hour(
                offset,
                record.temperature,
                record.apparent_temperature,
                record.precipitation.chance or 0,
                record.uv_index,
            )

        context = replace(context, **self._current_hour_fields(in_window[0]))
        context = replace(context, **self._graph_fields(self.graph_renderer.render(curves, local_start.hour)))
        context = replace(context, **self._table_fields(records, local_start, day_end, local_end))
        return context, []

    def with_validation_error(self, context: Context, stack: DiagnosticStack, diagnostic: Diagnostic) -> Context:
        """Add a diagnostic found while building; logged here at error level."""
        logging.error(diagnostic.long_description)
        stack.push(diagnostic)
        return self._with_banner(context, stack)

    def with_warning(self, context: Context, stack: DiagnosticStack, warning: Diagnostic) -> Context:
        """Add a warning from the fetch stage; the caller already logged it."""
        stack.push(warning)
        return self._with_banner(context, stack)

    @staticmethod
    def _with_banner(context: Context, stack: DiagnosticStack) -> Context:
        banner = stack.render()
        return replace(
            context,
            diagnostic_message=banner.message,
            diagnostic_visibility=VISIBILITY_VISIBLE if banner.visible else VISIBILITY_HIDDEN,
            diagnostic_icons_svg=banner.icons_svg,
            diagnostics=tuple(stack.diagnostics),
        )

    def _current_hour_fields(self, current_hour: HourlyForecast) -> Dict[str, str]:
        options = self.settings.render_options
        icons_dir = self.settings.paths.icons_dir
        now_local = self.clock.now_local()
        rain_amount = current_hour.precipitation.calculate_median()
        wind_kmh = current_hour.wind.get_speed(options.use_gust_instead_of_wind)
        return {
            "current_hour_actual_temp": format_number(current_hour.temperature),
            "current_hour_weather_icon": icon_path(
                icons_dir, weather_icon_name(current_hour.weather_code, current_hour.is_night)
            ),
            "current_hour_feels_like": format_number(current_hour.apparent_temperature),
            "current_day_date": now_local.strftime(options.date_format),
            "current_day_time": now_local.strftime(options.time_format),
            "current_hour_rain_amount": format_number(rain_amount, 1),
            "current_hour_rain_measure_icon": icon_path(icons_dir, rain_icon_name(rain_amount)),
            "current_hour_wind_speed": format_number(
                current_hour.wind.convert_speed(wind_kmh, options.wind_speed_unit)
            ),
            "current_hour_wind_icon": icon_path(icons_dir, wind_icon_name(wind_kmh)),
            "current_hour_uv_index": format_number(current_hour.uv_index),
            "current_hour_uv_index_icon": icon_path(icons_dir, uv_index_icon_name(current_hour.uv_index)),
            "current_hour_relative_humidity": format_number(current_hour.relative_humidity),
            "current_hour_relative_humidity_icon": icon_path(
                icons_dir, humidity_icon_name(current_hour.relative_humidity)
            ),
        }

    @staticmethod
    def _graph_fields(graph: GraphPaths) -> Dict[str, str]:
        return {
            "graph_height": str(graph.height),
            "graph_width": str(graph.width),
            "actual_temp_curve_data": graph.actual_temp_curve_data,
            "feel_like_curve_data": graph.feel_like_curve_data,
            "rain_curve_data": graph.rain_curve_data,
            "x_axis_path": graph.x_axis_path,
            "x_axis_guideline_path": graph.x_axis_guideline_path,
            "y_left_axis_path": graph.y_left_axis_path,
            "x_labels": graph.x_labels,
            "y_left_labels": graph.y_left_labels,
            "y_right_axis_path": graph.y_right_axis_path,
            "y_right_labels": graph.y_right_labels,
            "uv_gradient": graph.uv_gradient,
        }

    def _table_fields(
        self,
        records: Sequence[HourlyForecast],
        window_start: datetime,
        day_end: datetime,
        window_end: datetime,
    ) -> Dict[str, str]:
        logging.debug(
            f"Today's slice: {window_start:%H:%M} to {day_end:%H:%M}, "
            f"tomorrow's slice: {day_end:%H:%M} to {window_end:%H:%M}"
        )
        options = self.settings.render_options

        def local_time(record: HourlyForecast) -> datetime:
            return self.clock.to_local(record.time)

        def today_and_tomorrow(value_of: Callable[[HourlyForecast], float]) -> Tuple[float, str]:
            today = max_between(records, window_start, day_end, value_of, local_time)
            tomorrow = max_between(records, day_end, window_end, value_of, local_time)
            return pick_today_or_tomorrow(today, tomorrow)

        wind, wind_style = today_and_tomorrow(
            lambda record: record.wind.get_speed(options.use_gust_instead_of_wind)
        )
        uv_index, uv_style = today_and_tomorrow(lambda record: record.uv_index)
        humidity, humidity_style = today_and_tomorrow(lambda record: record.relative_humidity)
        total_rain = sum_between(
            records,
            window_start,
            window_end,
            lambda record: record.precipitation.calculate_median(),
            local_time,
        )
        return {
            "max_gust_speed": format_number(Wind.convert_speed(wind, options.wind_speed_unit)),
            "max_gust_speed_font_style": wind_style,
            "max_uv_index": format_number(uv_index),
            "max_uv_index_font_style": uv_style,
            "max_relative_humidity": format_number(humidity),
            "max_relative_humidity_font_style": humidity_style,
            "total_rain_today": format_number(total_rain, 1),
        }

