"""Chart rendering pipeline: series -> scales -> draw instructions.

Purpose
-------
Turns a :class:`~calcviz.chart_state.ChartState` and a
:class:`~calcviz.chart_config.ChartConfig` into drawing calls on a
:class:`~calcviz.drawing.DrawingSurface`, and answers pointer queries with
the function value, slope and tangent at the exact pointer position.

Concepts and structure
----------------------
Rendering is split in two pure steps:

1. :func:`compute_chart` samples the series the state needs, maps the
   derivative to gradient colors and builds both scales. The result is a
   :class:`ChartModel`; nothing is drawn yet.
2. :func:`draw_chart` walks the model and issues draw commands, one draw
   step per toggle, in a fixed back-to-front order.

:func:`render_chart` chains both. Scales are rebuilt on every call and never
reused across states.

Architecture notes
------------------
- Pixel coordinates: the x scale maps the domain onto ``[0, inner_width]``
  and the y scale maps the padded y-extent onto ``[inner_height, 0]``. Draw
  calls add the left/top margins, so surfaces receive device coordinates.
- The y-extent covers the finite values of the *visible* series only.
- Non-finite samples break curves into separate finite runs instead of
  poisoning the whole path.

Examples
--------
>>> from calcviz.chart_state import ChartState
>>> from calcviz.drawing import RecordingSurface
>>> model, surface = render_chart(ChartState(), surface=RecordingSurface())  # doctest: +SKIP
>>> "function" in surface.roles  # doctest: +SKIP
True
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .chart_config import DEFAULT_CONFIG, ChartConfig
from .chart_scales import LinearScale, padded_extent
from .chart_state import ChartState
from .chart_theme import get_theme
from .drawing import DrawingSurface, Point, RecordingSurface, Stroke
from .gradient import generate_gradient_colors
from .numeric_operations import derivative, integrate
from .sampling import SampleSeries, SeriesBundle, sample_series, sample_series_cached

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

LEGEND_OFFSET = 120
LEGEND_ROW = 20
POINTER_RADIUS = 5.0
SAMPLE_RADIUS = 2.5
TICK_SIZE = 6.0


@dataclass(frozen=True)
class PointerReadout:
    """Function value, slope and tangent segment at one domain position.

    ``tangent`` holds the segment endpoints in domain coordinates,
    ``half_length`` domain units to each side of ``x``.
    """

    x: float
    y: float
    slope: float
    tangent: Tuple[Point, Point]

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.y) and math.isfinite(self.slope)

    def tangent_at(self, x: float) -> float:
        return self.y + self.slope * (x - self.x)


@dataclass(frozen=True, eq=False)
class ChartModel:
    """Everything :func:`draw_chart` needs, computed from one state."""

    state: ChartState
    config: ChartConfig
    series: SeriesBundle
    colors: List[str]
    x_scale: LinearScale
    y_scale: LinearScale
    title: str
    equation: str
    area_value: Optional[float]
    readout: Optional[PointerReadout]
    theme: Mapping[str, str]

    @property
    def visible_series(self) -> List[SampleSeries]:
        return visible_series(self.state, self.series)


def visible_series(state: ChartState, bundle: SeriesBundle) -> List[SampleSeries]:
    """The series drawn for ``state``; the function curve is always first."""
    out = [bundle.function]
    if state.show_derivative:
        out.append(bundle.derivative)
    if state.show_second_derivative and bundle.second_derivative is not None:
        out.append(bundle.second_derivative)
    if state.show_integral and bundle.integral is not None:
        out.append(bundle.integral)
    return out


def _sample(state: ChartState, config: ChartConfig) -> SeriesBundle:
    sampler = sample_series_cached if config.use_cache else sample_series
    return sampler(
        state.function_name,
        state.domain,
        state.parameters,
        steps=config.steps,
        subdivisions=config.integral_subdivisions,
        h=config.derivative_step,
        h2=config.second_derivative_step,
        include_second_derivative=state.show_second_derivative,
        include_integral=state.show_integral,
    )


def x_scale_for(state: ChartState, config: ChartConfig = DEFAULT_CONFIG) -> LinearScale:
    return LinearScale(state.domain.as_tuple(), (0.0, config.inner_width))


def pixel_to_domain(state: ChartState, config: ChartConfig, pixel_x: float) -> float:
    """Invert a device pixel x to a domain x, clamped to the domain.

    ``pixel_x`` uses the same coordinates as the draw calls: pixels from the
    left edge of the surface, so the left margin is subtracted first.
    """
    return state.domain.clamp(x_scale_for(state, config).invert(pixel_x - config.margins.left))


def readout_at(state: ChartState, config: ChartConfig, x: float) -> PointerReadout:
    """Evaluate ``f`` and ``f'`` at the exact (unsampled) position ``x``."""
    f = state.function.bind(state.parameters)
    x = float(x)
    y = float(f(x))
    slope = float(derivative(f, x, config.derivative_step))
    half = config.tangent_half_length
    x0, x1 = x - half, x + half
    tangent = ((x0, y - half * slope), (x1, y + half * slope))
    return PointerReadout(x=x, y=y, slope=slope, tangent=tangent)


def pointer_readout(state: ChartState, config: ChartConfig, pixel_x: float) -> PointerReadout:
    """Read-out for a pointer at device pixel ``pixel_x``."""
    return readout_at(state, config, pixel_to_domain(state, config, pixel_x))


def compute_chart(state: ChartState, config: ChartConfig = DEFAULT_CONFIG) -> ChartModel:
    """Sample, color and scale everything ``state`` asks for."""
    bundle = _sample(state, config)
    colors = generate_gradient_colors(bundle.derivative.y, config.min_color, config.max_color)

    shown = visible_series(state, bundle)
    y_lo, y_hi = padded_extent((s.y for s in shown), config.padding_fraction)
    x_scale = x_scale_for(state, config)
    y_scale = LinearScale((y_lo, y_hi), (config.inner_height, 0.0))
    logger.debug("compute_chart: x=%s y=(%s, %s)", state.domain.as_tuple(), y_lo, y_hi)

    fn = state.function
    area_value = None
    if state.show_area:
        area_value = integrate(fn.bind(state.parameters), state.domain.x_min, state.domain.x_max)

    readout = None
    if state.pointer_x is not None:
        readout = readout_at(state, config, state.pointer_x)

    return ChartModel(
        state=state,
        config=config,
        series=bundle,
        colors=colors,
        x_scale=x_scale,
        y_scale=y_scale,
        title=f"Calculus Visualization: {fn.name} function",
        equation=fn.equation_text(state.parameters),
        area_value=area_value,
        readout=readout,
        theme=get_theme(state.dark_mode),
    )


def _fmt(value: float) -> str:
    if not math.isfinite(value):
        return "undefined"
    return f"{value:.4g}"


def _finite_runs(xs: np.ndarray, ys: np.ndarray) -> Iterator[List[Point]]:
    """Yield maximal runs of consecutive points whose coordinates are finite."""
    run: List[Point] = []
    for x, y in zip(xs, ys):
        if math.isfinite(x) and math.isfinite(y):
            run.append((float(x), float(y)))
        elif run:
            yield run
            run = []
    if run:
        yield run


def _clip_to_band(p0: Point, p1: Point, lo: float, hi: float) -> Optional[Tuple[Point, Point]]:
    """Clip segment ``p0-p1`` to ``lo <= y <= hi``; ``None`` when fully outside."""
    (x0, y0), (x1, y1) = p0, p1
    t0, t1 = 0.0, 1.0
    dy = y1 - y0
    for bound, inside in ((lo, lambda y: y >= lo), (hi, lambda y: y <= hi)):
        if dy == 0:
            if not inside(y0):
                return None
            continue
        t = (bound - y0) / dy
        if inside(y0):
            if not inside(y1):
                t1 = min(t1, t)
        elif inside(y1):
            t0 = max(t0, t)
        else:
            return None
    if t0 > t1:
        return None
    return ((x0 + t0 * (x1 - x0), y0 + t0 * dy), (x0 + t1 * (x1 - x0), y0 + t1 * dy))


class _Painter:
    """Draw steps for one model, translating plot-area pixels to device pixels."""

    def __init__(self, model: ChartModel, surface: DrawingSurface) -> None:
        self.m = model
        self.s = surface
        self.ox = model.config.margins.left
        self.oy = model.config.margins.top
        self.w = model.config.inner_width
        self.h = model.config.inner_height
        self.theme = model.theme

    # -- helpers ------------------------------------------------------------
    def _px(self, xs: Sequence[float] | np.ndarray, ys: Sequence[float] | np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        with np.errstate(all="ignore"):
            px = np.asarray(self.m.x_scale(np.asarray(xs, dtype=float)), dtype=float) + self.ox
            py = np.asarray(self.m.y_scale(np.asarray(ys, dtype=float)), dtype=float) + self.oy
        return px, py

    def _curve(self, series: SampleSeries, stroke: Stroke, role: str) -> None:
        px, py = self._px(series.x, series.y)
        for run in _finite_runs(px, py):
            if len(run) > 1:
                self.s.path(run, stroke, role=role, smooth=True)

    def _baseline(self) -> float:
        y0 = self.m.y_scale(0.0)
        return min(max(y0, 0.0), self.h) + self.oy

    # -- draw steps ---------------------------------------------------------
    def grid(self) -> None:
        stroke = Stroke(self.theme["grid"], 1.0)
        for t in self.m.x_scale.ticks():
            x = self.m.x_scale(t) + self.ox
            self.s.line(x, self.oy, x, self.oy + self.h, stroke, role="grid")
        for t in self.m.y_scale.ticks():
            y = self.m.y_scale(t) + self.oy
            self.s.line(self.ox, y, self.ox + self.w, y, stroke, role="grid")

    def axes(self) -> None:
        color = self.theme["axis"]
        text = self.theme["text"]
        stroke = Stroke(color, 1.0)
        bottom = self.oy + self.h
        self.s.line(self.ox, bottom, self.ox + self.w, bottom, stroke, role="axis")
        for t in self.m.x_scale.ticks():
            x = self.m.x_scale(t) + self.ox
            self.s.line(x, bottom, x, bottom + TICK_SIZE, stroke, role="axis")
            self.s.text(x, bottom + TICK_SIZE + 12, f"{t:g}", text, size=10, anchor="middle", role="axis")
        self.s.line(self.ox, self.oy, self.ox, bottom, stroke, role="axis")
        for t in self.m.y_scale.ticks():
            y = self.m.y_scale(t) + self.oy
            self.s.line(self.ox - TICK_SIZE, y, self.ox, y, stroke, role="axis")
            self.s.text(self.ox - TICK_SIZE - 3, y + 3, f"{t:g}", text, size=10, anchor="end", role="axis")
        self.s.text(self.ox + self.w / 2, bottom + 40, "x", text, anchor="middle", role="axis")
        self.s.text(self.ox - 40, self.oy + self.h / 2, "y", text, anchor="middle", rotate=-90, role="axis")

    def area(self) -> None:
        px, py = self._px(self.m.series.function.x, self.m.series.function.y)
        baseline = self._baseline()
        for run in _finite_runs(px, py):
            if len(run) > 1:
                self.s.area(run, baseline, self.theme["area"], opacity=1.0, role="area")

    def integral(self) -> None:
        if self.m.series.integral is not None:
            self._curve(self.m.series.integral, Stroke(self.theme["integral"], 2.0), "integral")

    def second_derivative(self) -> None:
        if self.m.series.second_derivative is not None:
            self._curve(self.m.series.second_derivative, Stroke(self.theme["second_derivative"], 2.0, dash="2,3"), "second_derivative")

    def derivative(self) -> None:
        self._curve(self.m.series.derivative, Stroke(self.theme["derivative"], 2.0, dash="5,5"), "derivative")

    def function(self) -> None:
        series = self.m.series.function
        if not self.m.state.gradient:
            self._curve(series, Stroke(self.theme["function"], 3.0), "function")
            return
        px, py = self._px(series.x, series.y)
        for i in range(len(px) - 1):
            seg = ((px[i], py[i]), (px[i + 1], py[i + 1]))
            if all(math.isfinite(v) for p in seg for v in p):
                self.s.path(seg, Stroke(self.m.colors[i], 3.0), role="function")

    def points(self) -> None:
        px, py = self._px(self.m.series.function.x, self.m.series.function.y)
        for x, y in zip(px, py):
            if math.isfinite(x) and math.isfinite(y):
                self.s.circle(x, y, SAMPLE_RADIUS, self.theme["points"], role="points")

    def pointer(self) -> None:
        r = self.m.readout
        if r is None:
            return
        text = self.theme["text"]
        label = f"x = {_fmt(r.x)}   f(x) = {_fmt(r.y)}   f'(x) = {_fmt(r.slope)}"
        self.s.text(self.ox + 8, self.oy + 14, label, text, size=12, role="readout")
        if not math.isfinite(r.y):
            return
        cx = self.m.x_scale(r.x) + self.ox
        cy = self.m.y_scale(r.y) + self.oy
        guide = Stroke(self.theme["guide"], 1.0, dash="3,3")
        bottom = self.oy + self.h
        if self.oy <= cy <= bottom:
            self.s.line(cx, cy, cx, bottom, guide, role="guide")
            self.s.line(self.ox, cy, cx, cy, guide, role="guide")
        if self.m.state.show_tangent and math.isfinite(r.slope):
            (ax, ay), (bx, by) = r.tangent
            p0 = (self.m.x_scale(ax) + self.ox, self.m.y_scale(ay) + self.oy)
            p1 = (self.m.x_scale(bx) + self.ox, self.m.y_scale(by) + self.oy)
            clipped = _clip_to_band(p0, p1, self.oy, bottom)
            if clipped is not None:
                (x0, y0), (x1, y1) = clipped
                self.s.line(x0, y0, x1, y1, Stroke(self.theme["tangent"], 2.0), role="tangent")
        if self.oy <= cy <= bottom:
            self.s.circle(cx, cy, POINTER_RADIUS, self.theme["pointer"], stroke=Stroke(self.theme["background"], 1.5), role="pointer")

    def legend(self) -> None:
        state = self.m.state
        entries = [("Function f(x)", Stroke(self.theme["function"], 3.0))]
        if state.show_derivative:
            entries.append(("Derivative f'(x)", Stroke(self.theme["derivative"], 2.0, dash="5,5")))
        if state.show_second_derivative:
            entries.append(("Second derivative f''(x)", Stroke(self.theme["second_derivative"], 2.0, dash="2,3")))
        if state.show_integral:
            entries.append(("Integral ∫f(x)dx", Stroke(self.theme["integral"], 2.0)))
        x0 = self.ox + self.w - LEGEND_OFFSET
        for row, (label, stroke) in enumerate(entries):
            y = self.oy + row * LEGEND_ROW
            self.s.line(x0, y, x0 + 30, y, stroke, role="legend")
            self.s.text(x0 + 35, y + 5, label, self.theme["text"], size=12, role="legend")
        if self.m.area_value is not None:
            y = self.oy + len(entries) * LEGEND_ROW
            self.s.text(x0 + 35, y + 5, f"Area = {_fmt(self.m.area_value)}", self.theme["text"], size=12, role="legend")

    def title(self) -> None:
        text = self.theme["text"]
        cx = self.ox + self.w / 2
        self.s.text(cx, self.oy - 15, self.m.title, text, size=18, anchor="middle", weight="bold", role="title")
        self.s.text(cx, self.oy + self.h + 55, self.m.equation, text, size=12, anchor="middle", role="equation")


def draw_chart(model: ChartModel, surface: DrawingSurface) -> DrawingSurface:
    """Issue the draw commands for ``model`` onto ``surface`` and return it.

    Order (back to front): grid, axes, area, integral, second derivative,
    derivative, function, sample points, pointer overlay, legend, title.
    Each optional step runs only when its toggle is on.
    """
    state = model.state
    cfg = model.config
    painter = _Painter(model, surface)

    surface.begin(cfg.width, cfg.height, model.theme["background"])
    if state.show_grid:
        painter.grid()
    painter.axes()
    if state.show_area:
        painter.area()
    if state.show_integral:
        painter.integral()
    if state.show_second_derivative:
        painter.second_derivative()
    if state.show_derivative:
        painter.derivative()
    painter.function()
    if state.show_points:
        painter.points()
    painter.pointer()
    painter.legend()
    painter.title()
    return surface


def render_chart(
    state: ChartState,
    config: ChartConfig = DEFAULT_CONFIG,
    surface: Optional[DrawingSurface] = None,
) -> Tuple[ChartModel, DrawingSurface]:
    """Compute and draw ``state``; a :class:`RecordingSurface` is used by default."""
    model = compute_chart(state, config)
    target = surface if surface is not None else RecordingSurface()
    draw_chart(model, target)
    return model, target


__all__ = [
    "ChartModel",
    "PointerReadout",
    "compute_chart",
    "draw_chart",
    "pixel_to_domain",
    "pointer_readout",
    "readout_at",
    "render_chart",
    "visible_series",
    "x_scale_for",
]
