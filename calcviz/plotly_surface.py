"""Plotly realization of the chart draw commands.

Purpose
-------
:class:`PlotlySurface` implements :class:`~calcviz.drawing.DrawingSurface`
on top of a ``plotly.graph_objects.Figure`` (or ``FigureWidget``). The
renderer works in device pixels, so the figure uses hidden axes pinned to
``[0, width]`` and ``[height, 0]`` and zero margins: one axis unit is one
pixel and y grows downwards, as on an SVG canvas.

Mapping
-------
- ``line`` and two-point ``path`` calls become layout shapes (cheap, one per
  gradient segment).
- longer paths and areas become ``Scatter`` traces; ``smooth`` paths use
  Plotly's spline line shape.
- consecutive ``circle`` calls with the same style merge into one marker trace.
- ``text`` becomes a layout annotation.

Draw calls only accumulate specs; the figure is synchronized lazily, in a
single ``batch_update``, when :attr:`figure` or :meth:`serialize` is used.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import plotly.graph_objects as go

from .drawing import Point, Stroke

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_ANCHORS = {"start": "left", "middle": "center", "end": "right"}


def plotly_dash(dash: Optional[str]) -> str:
    """Translate an SVG dash array (``"5,5"``) to Plotly's ``"5px,5px"``."""
    if not dash:
        return "solid"
    parts = [p.strip() for p in dash.replace(" ", ",").split(",") if p.strip()]
    return ",".join(f"{p}px" for p in parts)


def _line_style(stroke: Stroke) -> Dict[str, Any]:
    return dict(color=stroke.color, width=stroke.width, dash=plotly_dash(stroke.dash))


class PlotlySurface:
    """Drawing surface backed by a Plotly figure.

    Parameters
    ----------
    figure : go.Figure or go.FigureWidget, optional
        Target figure. A fresh ``go.Figure`` is created when omitted.

    Attributes
    ----------
    overlays : list of dict
        Extra trace specs appended after the drawn traces on every sync
        (used by the notebook widget for its hover catcher).
    """

    def __init__(self, figure: Optional[go.Figure] = None) -> None:
        self._figure = figure if figure is not None else go.Figure()
        self.overlays: List[Dict[str, Any]] = []
        self._reset(0.0, 0.0, "white")

    def _reset(self, width: float, height: float, background: str) -> None:
        self.width = float(width)
        self.height = float(height)
        self.background = background
        self._traces: List[Dict[str, Any]] = []
        self._shapes: List[Dict[str, Any]] = []
        self._annotations: List[Dict[str, Any]] = []
        self._last_marker_key: Optional[tuple] = None
        self._dirty = True

    # --- DrawingSurface -------------------------------------------------
    def begin(self, width: float, height: float, background: str) -> None:
        self._reset(width, height, background)

    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: Stroke, *, role: str = "") -> None:
        self._last_marker_key = None
        self._shapes.append(
            dict(
                type="line",
                xref="x",
                yref="y",
                x0=float(x1),
                y0=float(y1),
                x1=float(x2),
                y1=float(y2),
                line=_line_style(stroke),
                opacity=stroke.opacity,
                layer="above",
                name=role,
            )
        )
        self._dirty = True

    def path(self, points: Sequence[Point], stroke: Stroke, *, role: str = "", smooth: bool = False) -> None:
        pts = [(float(x), float(y)) for x, y in points]
        if len(pts) == 2:
            (x1, y1), (x2, y2) = pts
            self.line(x1, y1, x2, y2, stroke, role=role)
            return
        self._last_marker_key = None
        self._traces.append(
            dict(
                type="scatter",
                mode="lines",
                x=[p[0] for p in pts],
                y=[p[1] for p in pts],
                line=dict(_line_style(stroke), shape="spline" if smooth else "linear"),
                opacity=stroke.opacity,
                name=role,
                hoverinfo="skip",
                showlegend=False,
            )
        )
        self._dirty = True

    def area(self, points: Sequence[Point], baseline: float, fill: str, *, opacity: float = 1.0, role: str = "") -> None:
        pts = [(float(x), float(y)) for x, y in points]
        if not pts:
            return
        self._last_marker_key = None
        xs = [p[0] for p in pts] + [pts[-1][0], pts[0][0]]
        ys = [p[1] for p in pts] + [float(baseline), float(baseline)]
        self._traces.append(
            dict(
                type="scatter",
                mode="none",
                x=xs,
                y=ys,
                fill="toself",
                fillcolor=fill,
                opacity=opacity,
                name=role,
                hoverinfo="skip",
                showlegend=False,
            )
        )
        self._dirty = True

    def circle(self, cx: float, cy: float, r: float, fill: str, *, stroke: Optional[Stroke] = None, role: str = "") -> None:
        key = (role, fill, float(r), stroke)
        if key == self._last_marker_key:
            trace = self._traces[-1]
            trace["x"].append(float(cx))
            trace["y"].append(float(cy))
        else:
            marker: Dict[str, Any] = dict(color=fill, size=2.0 * float(r))
            if stroke is not None:
                marker["line"] = dict(color=stroke.color, width=stroke.width)
            self._traces.append(
                dict(
                    type="scatter",
                    mode="markers",
                    x=[float(cx)],
                    y=[float(cy)],
                    marker=marker,
                    name=role,
                    hoverinfo="skip",
                    showlegend=False,
                )
            )
            self._last_marker_key = key
        self._dirty = True

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
        if anchor not in _ANCHORS:
            raise ValueError(f"anchor must be one of {tuple(_ANCHORS)}, got {anchor!r}")
        self._last_marker_key = None
        label = f"<b>{text}</b>" if weight == "bold" else str(text)
        self._annotations.append(
            dict(
                x=float(x),
                y=float(y),
                xref="x",
                yref="y",
                text=label,
                showarrow=False,
                xanchor=_ANCHORS[anchor],
                yanchor="bottom",
                textangle=float(rotate),
                font=dict(color=color, size=size),
                name=role,
            )
        )
        self._dirty = True

    def serialize(self) -> str:
        """Plotly JSON of the current drawing."""
        return self.figure.to_json()

    # --- Figure synchronization -----------------------------------------
    def _layout(self) -> Dict[str, Any]:
        axis = dict(visible=False, showgrid=False, zeroline=False, fixedrange=True)
        return dict(
            width=int(round(self.width)) or None,
            height=int(round(self.height)) or None,
            margin=dict(l=0, r=0, t=0, b=0),
            paper_bgcolor=self.background,
            plot_bgcolor=self.background,
            showlegend=False,
            hovermode="x",
            dragmode=False,
            xaxis=dict(axis, range=[0.0, self.width]),
            yaxis=dict(axis, range=[self.height, 0.0]),
        )

    def sync(self) -> None:
        """Push accumulated commands into the figure if anything changed."""
        if not self._dirty:
            return
        fig = self._figure
        fig.data = ()
        with fig.batch_update():
            fig.update_layout(**self._layout())
            # update_layout merges arrays by position; assignment replaces them.
            fig.layout.shapes = tuple(self._shapes)
            fig.layout.annotations = tuple(self._annotations)
        fig.add_traces([dict(t) for t in self._traces] + [dict(t) for t in self.overlays])
        self._dirty = False
        logger.debug(
            "sync: traces=%d shapes=%d annotations=%d",
            len(self._traces),
            len(self._shapes),
            len(self._annotations),
        )

    @property
    def figure(self) -> go.Figure:
        self.sync()
        return self._figure


__all__ = ["PlotlySurface", "plotly_dash"]
