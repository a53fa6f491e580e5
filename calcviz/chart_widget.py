"""Notebook controls for a :class:`~calcviz.CalculusChart.CalculusChart`.

The widget tree is a plain ``ipywidgets.VBox``: a control row (function
dropdown, domain fields, animation controls), parameter sliders, toggle
checkboxes, the Plotly ``FigureWidget`` and a status line.

Controls never change the chart state directly. Every user edit becomes a
chart action (``select_function``, ``set_domain``, ``set_parameter``,
``set_toggle``, ``start_animation``...), and the widget redraws from a chart
hook. The figure carries an invisible hover-catcher trace across the plot
area; its hover and unhover callbacks feed ``pointer_move`` and
``pointer_leave``.
"""

from __future__ import annotations

import html
import logging
import math
from typing import Any, Dict, List

import ipywidgets as widgets
import numpy as np
import plotly.graph_objects as go

from .chart_renderer import draw_chart
from .chart_state import TOGGLES
from .ChartEvent import ChartEvent
from .errors import ConfigurationError
from .function_registry import PARAMETER_NAMES, iter_sample_functions
from .InputConvert import InputConvert
from .plotly_surface import PlotlySurface

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

TOGGLE_LABELS = {
    "show_derivative": "Derivative",
    "show_second_derivative": "Second derivative",
    "show_integral": "Integral",
    "show_area": "Area",
    "show_grid": "Grid",
    "show_points": "Points",
    "show_tangent": "Tangent",
    "dark_mode": "Dark mode",
    "gradient": "Gradient",
}

SLIDER_RANGES = {
    "amplitude": (0.1, 5.0, 0.05),
    "frequency": (0.1, 5.0, 0.05),
    "phase": (-math.pi, math.pi, 0.01),
}

HOVER_CATCHER = "hover-catcher"
CATCHER_SPACING_PX = 2.0


class ChartWidget(widgets.VBox):
    """Interactive front end for one chart.

    Parameters
    ----------
    chart : CalculusChart
        Chart to drive. The widget registers a hook on it and removes the
        hook in :meth:`close`.
    """

    def __init__(self, chart: Any, **kwargs: Any) -> None:
        self.chart = chart
        self._syncing = False
        state = chart.state

        self.function_dropdown = widgets.Dropdown(
            options=[(fn.title, fn.name) for fn in iter_sample_functions()],
            value=state.function_name,
            description="Function",
            layout=widgets.Layout(width="220px"),
        )
        self.x_min_text = widgets.Text(
            value=f"{state.domain.x_min:g}",
            description="x min",
            continuous_update=False,
            layout=widgets.Layout(width="150px"),
        )
        self.x_max_text = widgets.Text(
            value=f"{state.domain.x_max:g}",
            description="x max",
            continuous_update=False,
            layout=widgets.Layout(width="150px"),
        )
        self.animate_button = widgets.ToggleButton(
            value=state.animating,
            description="Animate",
            icon="play",
            layout=widgets.Layout(width="110px"),
        )
        self.animation_target = widgets.Dropdown(
            options=list(PARAMETER_NAMES),
            value=state.animation_target,
            layout=widgets.Layout(width="120px"),
        )

        self.sliders: Dict[str, widgets.FloatSlider] = {}
        for name in PARAMETER_NAMES:
            lo, hi, step = SLIDER_RANGES[name]
            self.sliders[name] = widgets.FloatSlider(
                value=getattr(state.parameters, name),
                min=lo,
                max=hi,
                step=step,
                description=name.capitalize(),
                continuous_update=True,
                readout_format=".2f",
                layout=widgets.Layout(width="320px"),
            )

        self.checkboxes: Dict[str, widgets.Checkbox] = {
            name: widgets.Checkbox(
                value=getattr(state, name),
                description=TOGGLE_LABELS[name],
                indent=False,
                layout=widgets.Layout(width="150px"),
            )
            for name in TOGGLES
        }

        self.figure_widget = go.FigureWidget()
        self.surface = PlotlySurface(self.figure_widget)
        self.status = widgets.HTML(value="", layout=widgets.Layout(margin="4px 0 0 0"))

        controls = widgets.HBox(
            [self.function_dropdown, self.x_min_text, self.x_max_text, self.animate_button, self.animation_target],
            layout=widgets.Layout(flex_flow="row wrap"),
        )
        sliders = widgets.HBox(list(self.sliders.values()), layout=widgets.Layout(flex_flow="row wrap"))
        toggles = widgets.HBox(list(self.checkboxes.values()), layout=widgets.Layout(flex_flow="row wrap"))
        super().__init__(
            [controls, sliders, toggles, self.figure_widget, self.status],
            layout=widgets.Layout(width="100%"),
            **kwargs,
        )

        self.function_dropdown.observe(self._on_function, names="value")
        self.x_min_text.observe(self._on_domain, names="value")
        self.x_max_text.observe(self._on_domain, names="value")
        self.animate_button.observe(self._on_animate, names="value")
        self.animation_target.observe(self._on_animation_target, names="value")
        for name, slider in self.sliders.items():
            slider.observe(lambda change, name=name: self._on_slider(name, change), names="value")
        for name, box in self.checkboxes.items():
            box.observe(lambda change, name=name: self._on_checkbox(name, change), names="value")

        self._hook_id = chart.add_hook(self._on_chart_event)
        self.redraw()

    # --- Drawing ---------------------------------------------------------

    def _catcher_trace(self) -> Dict[str, Any]:
        cfg = self.chart.config
        left = cfg.margins.left
        xs: List[float] = [float(v) for v in np.arange(left, left + cfg.inner_width + 1e-9, CATCHER_SPACING_PX)]
        return dict(
            type="scatter",
            mode="markers",
            x=xs,
            y=[cfg.margins.top + cfg.inner_height / 2.0] * len(xs),
            marker=dict(size=1, opacity=0),
            hoverinfo="none",
            name=HOVER_CATCHER,
            showlegend=False,
        )

    def redraw(self) -> None:
        """Draw the chart's current model onto the figure widget."""
        self.surface.overlays = [self._catcher_trace()]
        draw_chart(self.chart.model, self.surface)
        self.surface.sync()
        catcher = self.figure_widget.data[-1]
        catcher.on_hover(self._on_hover)
        catcher.on_unhover(self._on_unhover)
        self._update_readout()

    def _update_readout(self) -> None:
        r = self.chart.readout
        if r is None:
            self.status.value = ""
            return
        self.status.value = f"x = {r.x:.4g}, f(x) = {r.y:.4g}, f'(x) = {r.slope:.4g}"

    # --- Chart -> controls -------------------------------------------------

    def _on_chart_event(self, event: ChartEvent) -> None:
        self._sync_controls()
        self.redraw()

    def _sync_controls(self) -> None:
        state = self.chart.state
        self._syncing = True
        try:
            self.function_dropdown.value = state.function_name
            self.x_min_text.value = f"{state.domain.x_min:g}"
            self.x_max_text.value = f"{state.domain.x_max:g}"
            self.animate_button.value = state.animating
            self.animate_button.icon = "pause" if state.animating else "play"
            self.animation_target.value = state.animation_target
            for name, slider in self.sliders.items():
                value = getattr(state.parameters, name)
                slider.max = max(slider.max, value)
                slider.min = min(slider.min, value)
                slider.value = value
            for name, box in self.checkboxes.items():
                box.value = getattr(state, name)
        finally:
            self._syncing = False

    # --- Controls -> chart -------------------------------------------------

    def _apply(self, action, *args: Any) -> None:
        try:
            action(*args)
        except (ConfigurationError, KeyError, ValueError, TypeError) as exc:
            self.status.value = f"<span style='color:#b91c1c'>{html.escape(str(exc))}</span>"
            self._sync_controls()

    def _on_function(self, change) -> None:
        if not self._syncing:
            self._apply(self.chart.select_function, change.new)

    def _on_domain(self, change) -> None:
        if self._syncing:
            return
        try:
            x_min = InputConvert(self.x_min_text.value.strip(), dest_type=float)
            x_max = InputConvert(self.x_max_text.value.strip(), dest_type=float)
        except (ValueError, TypeError, SyntaxError):
            # Revert to the committed domain
            self._sync_controls()
            return
        self._apply(self.chart.set_domain, x_min, x_max)

    def _on_slider(self, name: str, change) -> None:
        if not self._syncing:
            self._apply(self.chart.set_parameter, name, change.new)

    def _on_checkbox(self, name: str, change) -> None:
        if not self._syncing:
            self._apply(self.chart.set_toggle, name, change.new)

    def _on_animate(self, change) -> None:
        if self._syncing:
            return
        if change.new:
            self._apply(self.chart.start_animation, self.animation_target.value)
        else:
            self._apply(self.chart.stop_animation)

    def _on_animation_target(self, change) -> None:
        if not self._syncing and self.chart.state.animating:
            self._apply(self.chart.start_animation, change.new)

    # --- Pointer -----------------------------------------------------------

    def _on_hover(self, trace, points, state) -> None:
        if not points.xs:
            return
        self.chart.pointer_move(points.xs[0])

    def _on_unhover(self, trace, points, state) -> None:
        self.chart.pointer_leave()

    def close(self) -> None:
        self.chart.remove_hook(self._hook_id)
        super().close()


__all__ = ["ChartWidget", "TOGGLE_LABELS"]
