"""Diagnostics shown on the dashboard banner - ranked events and their stacked icon layout."""
import functools
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple

from weather_icons import icon_path


@functools.total_ordering
class DiagnosticKind(Enum):
    """
    Diagnostic kinds, ordered by a fixed priority (higher wins).

    Value is (priority, short description, icon file name).
    """
    NO_INTERNET = (4, "No Internet", "diagnostic-no-internet.svg")
    API_ERROR = (3, "API Error", "diagnostic-api-error.svg")
    INCOMPLETE_DATA = (2, "Incomplete Data", "diagnostic-incomplete.svg")
    UPDATE_FAILED = (1, "Update Failed", "diagnostic-update-failed.svg")

    @property
    def priority(self) -> int:
        return self.value[0]

    @property
    def short_description(self) -> str:
        return self.value[1]

    @property
    def icon_name(self) -> str:
        return self.value[2]

    def __lt__(self, other):
        if not isinstance(other, DiagnosticKind):
            return NotImplemented
        return self.priority < other.priority


@dataclass(frozen=True)
class Diagnostic:
    """A single data-quality or operational event."""
    kind: DiagnosticKind
    details: str

    @classmethod
    def incomplete_data(cls, details: str) -> "Diagnostic":
        return cls(DiagnosticKind.INCOMPLETE_DATA, details)

    @classmethod
    def update_failed(cls, details: str) -> "Diagnostic":
        return cls(DiagnosticKind.UPDATE_FAILED, details)

    @classmethod
    def api_error(cls, details: str) -> "Diagnostic":
        return cls(DiagnosticKind.API_ERROR, details)

    @classmethod
    def no_internet(cls, details: str) -> "Diagnostic":
        return cls(DiagnosticKind.NO_INTERNET, details)

    @property
    def priority(self) -> int:
        return self.kind.priority

    @property
    def short_description(self) -> str:
        return self.kind.short_description

    @property
    def long_description(self) -> str:
        return f"{self.kind.short_description}: {self.details}"

    def get_icon_path(self, icons_dir: str) -> str:
        return icon_path(icons_dir, self.kind.icon_name)


class BannerState(NamedTuple):
    visible: bool
    message: str
    icons_svg: str


class DiagnosticStack:
    """Ordered collection of the diagnostics raised during one dashboard run."""

    ICON_SIZE = 74
    X_START = 63  # position of the highest-priority icon
    Y_START = -10
    X_STEP = -5  # each lower-priority icon moves left and up
    Y_STEP = -3
    ICON_SEPARATOR = "\n        "

    def __init__(self, icons_dir: str):
        self.icons_dir = icons_dir
        self._diagnostics: List[Diagnostic] = []

    def push(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    def __len__(self) -> int:
        return len(self._diagnostics)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def render(self) -> BannerState:
        """
        Compute the banner for the current diagnostics.

        The message is the short description of the highest-priority
        diagnostic (the first one found wins a tie). Every diagnostic
        gets one stacked image element.

        Returns:
            BannerState(visible, message, icons_svg)
        """
        if not self._diagnostics:
            return BannerState(False, "", "")
        highest = max(self._diagnostics, key=lambda d: d.kind)
        return BannerState(True, highest.short_description, self._render_icons())

    def _render_icons(self) -> str:
        # Stable sort: equal priorities keep insertion order
        ordered = sorted(self._diagnostics, key=lambda d: d.kind, reverse=True)
        elements = []
        # Lowest priority first so the highest priority is drawn on top
        for index in reversed(range(len(ordered))):
            x_pos = self.X_START + index * self.X_STEP
            y_pos = self.Y_START + index * self.Y_STEP
            href = ordered[index].get_icon_path(self.icons_dir)
            elements.append(
                f'<image x="{x_pos}" y="{y_pos}" width="{self.ICON_SIZE}" '
                f'height="{self.ICON_SIZE}" href="{href}"/>'
            )
        return self.ICON_SEPARATOR.join(elements)
