"""Hourly forecast graph - pure functions turning binned hourly curves into SVG path and label strings."""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

CURVE_LENGTH = 24  # one slot per hour offset 0..23
X_LABEL_EVERY_HOURS = 6
Y_TICKS = 5


@dataclass
class HourlyCurves:
    """Fixed-size per-hour buffers handed to the graph renderer."""
    temperature: List[Optional[float]] = field(default_factory=lambda: [None] * CURVE_LENGTH)
    apparent_temperature: List[Optional[float]] = field(default_factory=lambda: [None] * CURVE_LENGTH)
    rain_chance: List[Optional[float]] = field(default_factory=lambda: [None] * CURVE_LENGTH)
    uv_index: List[float] = field(default_factory=lambda: [0.0] * CURVE_LENGTH)

    def set_hour(self, offset: int, temperature: float, apparent_temperature: float,
                 rain_chance: float, uv_index: float) -> None:
        if not 0 <= offset < CURVE_LENGTH:
            raise IndexError(f"Hour offset {offset} outside 0..{CURVE_LENGTH - 1}")
        self.temperature[offset] = temperature
        self.apparent_temperature[offset] = apparent_temperature
        self.rain_chance[offset] = rain_chance
        self.uv_index[offset] = uv_index

    @staticmethod
    def points(values: List[Optional[float]]) -> List[Tuple[int, float]]:
        return [(x, v) for x, v in enumerate(values) if v is not None]


@dataclass(frozen=True)
class GraphPaths:
    """SVG fragments produced by a graph renderer."""
    width: int = 600
    height: int = 300
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


class GraphRendererBase(ABC):
    """Abstract graph renderer: numeric curves in, SVG strings out."""

    @abstractmethod
    def render(self, curves: HourlyCurves, start_hour: int) -> GraphPaths:
        """
        Render the hourly curves.

        Args:
            curves: Per-hour values, offset 0 is the current hour
            start_hour: Local wall-clock hour of offset 0 (for axis labels)

        Returns:
            GraphPaths
        """
        pass


def get_uv_colour(uv_index: float) -> str:
    """
    Get the WHO colour band for a UV index.

    Low (< 3) = green
    Moderate (3-6) = yellow
    High (6-8) = orange
    Very high (8-11) = red
    Extreme (>= 11) = purple
    """
    if uv_index < 3:
        return "green"
    elif uv_index < 6:
        return "yellow"
    elif uv_index < 8:
        return "orange"
    elif uv_index < 11:
        return "red"
    return "purple"


def _fmt(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


def build_path(points: List[Tuple[float, float]]) -> str:
    """Build SVG path data ("M x y L x y ...") from pixel coordinates."""
    return " ".join(
        f"{'M' if index == 0 else 'L'} {_fmt(x)} {_fmt(y)}"
        for index, (x, y) in enumerate(points)
    )


class SvgGraphRenderer(GraphRendererBase):
    """Plain line-graph renderer: temperatures on the left axis, rain chance (%) on the right."""

    def __init__(self, width: int = 600, height: int = 300, text_colour: str = "black",
                 x_axis_always_at_min: bool = False):
        self.width = width
        self.height = height
        self.text_colour = text_colour
        self.x_axis_always_at_min = x_axis_always_at_min
        self.x_step = width / (CURVE_LENGTH - 1)

    def temperature_range(self, curves: HourlyCurves) -> Tuple[float, float]:
        values = [v for v in curves.temperature + curves.apparent_temperature if v is not None]
        if not values:
            return 0.0, 1.0
        low, high = math.floor(min(values)), math.ceil(max(values))
        if low == high:
            high = low + 1
        return float(low), float(high)

    def render(self, curves: HourlyCurves, start_hour: int) -> GraphPaths:
        low, high = self.temperature_range(curves)

        def temp_y(value: float) -> float:
            return self.height - (value - low) / (high - low) * self.height

        def rain_y(value: float) -> float:
            return self.height - min(max(value, 0.0), 100.0) / 100.0 * self.height

        def to_pixels(values, scale):
            return [(x * self.x_step, scale(v)) for x, v in HourlyCurves.points(values)]

        if self.x_axis_always_at_min or not low <= 0 <= high:
            axis_y = float(self.height)
        else:
            axis_y = temp_y(0.0)

        return GraphPaths(
            width=self.width,
            height=self.height,
            actual_temp_curve_data=build_path(to_pixels(curves.temperature, temp_y)),
            feel_like_curve_data=build_path(to_pixels(curves.apparent_temperature, temp_y)),
            rain_curve_data=build_path(to_pixels(curves.rain_chance, rain_y)),
            x_axis_path=f"M 0 {_fmt(axis_y)} L {self.width} {_fmt(axis_y)}",
            x_axis_guideline_path=self._guidelines(),
            y_left_axis_path=f"M 0 0 L 0 {self.height}",
            x_labels=self._x_labels(start_hour),
            y_left_labels=self._y_labels(low, high, temp_y, x=-10, anchor="end", suffix="°"),
            y_right_axis_path=f"M {self.width} 0 L {self.width} {self.height}",
            y_right_labels=self._y_labels(0.0, 100.0, rain_y, x=self.width + 10, anchor="start", suffix="%"),
            uv_gradient=self._uv_gradient(curves.uv_index),
        )

    def _label_offsets(self) -> range:
        return range(0, CURVE_LENGTH, X_LABEL_EVERY_HOURS)

    def _guidelines(self) -> str:
        return " ".join(
            f"M {_fmt(offset * self.x_step)} 0 L {_fmt(offset * self.x_step)} {self.height}"
            for offset in self._label_offsets()
            if offset > 0
        )

    def _x_labels(self, start_hour: int) -> str:
        labels = []
        for offset in self._label_offsets():
            hour = (start_hour + offset) % 24
            labels.append(
                f'<text x="{_fmt(offset * self.x_step)}" y="{self.height + 20}" '
                f'fill="{self.text_colour}" text-anchor="middle">{hour:02d}:00</text>'
            )
        return "".join(labels)

    def _y_labels(self, low, high, scale, x, anchor, suffix) -> str:
        labels = []
        step = (high - low) / (Y_TICKS - 1)
        for tick in range(Y_TICKS):
            value = low + tick * step
            labels.append(
                f'<text x="{x}" y="{_fmt(scale(value))}" fill="{self.text_colour}" '
                f'text-anchor="{anchor}" dominant-baseline="middle">{_fmt(value)}{suffix}</text>'
            )
        return "".join(labels)

    def _uv_gradient(self, uv_values: List[float]) -> str:
        stops = []
        for offset, uv_index in enumerate(uv_values):
            position = offset / (CURVE_LENGTH - 1) * 100
            stops.append(f'<stop offset="{_fmt(position)}%" stop-color="{get_uv_colour(uv_index)}"/>')
        return "".join(stops)
