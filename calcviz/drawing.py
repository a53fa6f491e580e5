"""Drawing-surface abstraction used by the chart renderer.

Purpose
-------
The renderer never talks to a graphics API. It calls the small
:class:`DrawingSurface` protocol (``line``, ``path``, ``area``, ``circle``,
``text``) with device coordinates: pixels from the top-left corner of the
surface, y growing downwards.

Concepts and structure
----------------------
- Each call corresponds to one frozen ``*Command`` record. Every record
  carries a ``role`` string (``"function"``, ``"tangent"``, ``"legend"``...)
  so consumers and tests can select the commands of one draw step.
- :class:`RecordingSurface` keeps the commands in call order. It is the pure
  "draw instructions" target; :mod:`calcviz.plotly_surface` replays the same
  calls onto a Plotly figure.
- ``serialize()`` is the export hook: it returns a portable representation
  of the current drawing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional, Protocol, Sequence, Tuple, Union

Point = Tuple[float, float]


@dataclass(frozen=True)
class Stroke:
    """Line style: CSS color, width in pixels, optional dash pattern (e.g. ``"5,5"``)."""

    color: str
    width: float = 1.0
    dash: Optional[str] = None
    opacity: float = 1.0


@dataclass(frozen=True)
class LineCommand:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: Stroke
    role: str = ""
    kind: str = field(default="line", init=False)


@dataclass(frozen=True)
class PathCommand:
    points: Tuple[Point, ...]
    stroke: Stroke
    role: str = ""
    smooth: bool = False
    kind: str = field(default="path", init=False)


@dataclass(frozen=True)
class AreaCommand:
    """Filled polygon between ``points`` and the horizontal line ``baseline``."""

    points: Tuple[Point, ...]
    baseline: float
    fill: str
    opacity: float = 1.0
    role: str = ""
    kind: str = field(default="area", init=False)


@dataclass(frozen=True)
class CircleCommand:
    cx: float
    cy: float
    r: float
    fill: str
    stroke: Optional[Stroke] = None
    role: str = ""
    kind: str = field(default="circle", init=False)


@dataclass(frozen=True)
class TextCommand:
    x: float
    y: float
    text: str
    color: str
    size: float = 12.0
    anchor: str = "start"
    weight: str = "normal"
    rotate: float = 0.0
    role: str = ""
    kind: str = field(default="text", init=False)


DrawCommand = Union[LineCommand, PathCommand, AreaCommand, CircleCommand, TextCommand]

TEXT_ANCHORS = ("start", "middle", "end")


class DrawingSurface(Protocol):
    """Target of the chart renderer, sized in pixels."""

    def begin(self, width: float, height: float, background: str) -> None:
        """Clear the surface and set its size and background color."""

    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: Stroke, *, role: str = "") -> None: ...

    def path(self, points: Sequence[Point], stroke: Stroke, *, role: str = "", smooth: bool = False) -> None: ...

    def area(self, points: Sequence[Point], baseline: float, fill: str, *, opacity: float = 1.0, role: str = "") -> None: ...

    def circle(self, cx: float, cy: float, r: float, fill: str, *, stroke: Optional[Stroke] = None, role: str = "") -> None: ...

    def text(
        self,
        x: float,
        y: float,
        text: str,
        color: str,
        *,
        size: float = 12.0,
        anchor: str = "start",
        weight: str = "normal",
        rotate: float = 0.0,
        role: str = "",
    ) -> None: ...

    def serialize(self) -> Any:
        """Return a portable representation of the current drawing."""


def _as_points(points: Iterable[Sequence[float]]) -> Tuple[Point, ...]:
    return tuple((float(x), float(y)) for x, y in points)


class RecordingSurface:
    """Surface that records draw commands in call order.

    Examples
    --------
    >>> s = RecordingSurface()
    >>> s.begin(100, 50, "white")
    >>> s.line(0, 0, 10, 10, Stroke("black"), role="axis")
    >>> [c.kind for c in s.commands]
    ['line']
    """

    def __init__(self) -> None:
        self.width = 0.0
        self.height = 0.0
        self.background = "white"
        self.commands: list[DrawCommand] = []

    def begin(self, width: float, height: float, background: str) -> None:
        self.width = float(width)
        self.height = float(height)
        self.background = background
        self.commands = []

    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: Stroke, *, role: str = "") -> None:
        self.commands.append(LineCommand(float(x1), float(y1), float(x2), float(y2), stroke, role))

    def path(self, points: Sequence[Point], stroke: Stroke, *, role: str = "", smooth: bool = False) -> None:
        self.commands.append(PathCommand(_as_points(points), stroke, role, smooth))

    def area(self, points: Sequence[Point], baseline: float, fill: str, *, opacity: float = 1.0, role: str = "") -> None:
        self.commands.append(AreaCommand(_as_points(points), float(baseline), fill, float(opacity), role))

    def circle(self, cx: float, cy: float, r: float, fill: str, *, stroke: Optional[Stroke] = None, role: str = "") -> None:
        self.commands.append(CircleCommand(float(cx), float(cy), float(r), fill, stroke, role))

    def text(
        self,
        x: float,
        y: float,
        text: str,
        color: str,
        *,
        size: float = 12.0,
        anchor: str = "start",
        weight: str = "normal",
        rotate: float = 0.0,
        role: str = "",
    ) -> None:
        if anchor not in TEXT_ANCHORS:
            raise ValueError(f"anchor must be one of {TEXT_ANCHORS}, got {anchor!r}")
        self.commands.append(TextCommand(float(x), float(y), str(text), color, float(size), anchor, weight, float(rotate), role))

    def by_role(self, role: str) -> list[DrawCommand]:
        return [c for c in self.commands if c.role == role]

    @property
    def roles(self) -> list[str]:
        """Distinct roles in first-drawn order."""
        seen: dict[str, None] = {}
        for c in self.commands:
            seen.setdefault(c.role, None)
        return list(seen)

    def serialize(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "background": self.background,
            "commands": [asdict(c) for c in self.commands],
        }


__all__ = [
    "AreaCommand",
    "CircleCommand",
    "DrawCommand",
    "DrawingSurface",
    "LineCommand",
    "PathCommand",
    "Point",
    "RecordingSurface",
    "Stroke",
    "TextCommand",
]
