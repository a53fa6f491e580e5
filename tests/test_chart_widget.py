from __future__ import annotations

from types import SimpleNamespace
import importlib
from unittest.mock import patch

import plotly.graph_objects as go

from calcviz.animation import ManualFrameScheduler
from calcviz.CalculusChart import CalculusChart
from calcviz.chart_config import ChartConfig
from calcviz.chart_widget import HOVER_CATCHER, ChartWidget

SMALL = ChartConfig(steps=20, integral_subdivisions=10)


def _widget() -> tuple[CalculusChart, ChartWidget]:
    chart = CalculusChart(config=SMALL, scheduler=ManualFrameScheduler())
    return chart, ChartWidget(chart)


def test_widget_mirrors_initial_state() -> None:
    chart, w = _widget()

    assert w.function_dropdown.value == "sine"
    assert w.x_min_text.value == "-10"
    assert w.checkboxes["show_derivative"].value is True
    assert w.sliders["amplitude"].value == 1.0
    assert isinstance(w.figure_widget, go.FigureWidget)
    assert w.figure_widget.data[-1].name == HOVER_CATCHER


def test_controls_dispatch_chart_actions() -> None:
    chart, w = _widget()

    w.checkboxes["show_grid"].value = True
    w.sliders["amplitude"].value = 2.0
    w.function_dropdown.value = "cosine"

    assert chart.state.show_grid
    assert chart.state.parameters.amplitude == 2.0
    assert chart.state.function_name == "cosine"
    assert any(s.name == "grid" for s in w.figure_widget.layout.shapes)


def test_chart_actions_update_controls() -> None:
    chart, w = _widget()

    chart.select_function("logistic")
    chart.set_domain(-2, 3)

    assert w.function_dropdown.value == "logistic"
    assert (w.x_min_text.value, w.x_max_text.value) == ("-2", "3")


def test_invalid_domain_text_reverts_and_reports() -> None:
    chart, w = _widget()

    w.x_min_text.value = "pi"
    assert chart.state.domain.x_min == 3.141592653589793

    w.x_min_text.value = "20"
    assert chart.state.domain.x_min == 3.141592653589793
    assert w.x_min_text.value == "3.14159"
    assert "x_min &lt; x_max" in w.status.value

    w.x_min_text.value = "not a number +"
    assert w.x_min_text.value == "3.14159"


def test_hover_moves_pointer_and_unhover_clears_it() -> None:
    chart, w = _widget()
    left = SMALL.margins.left

    w._on_hover(None, SimpleNamespace(xs=[left + SMALL.inner_width / 2]), None)
    assert chart.state.pointer_x == 0.0
    assert w.status.value.startswith("x = 0")

    w._on_unhover(None, SimpleNamespace(xs=[]), None)
    assert chart.state.pointer_x is None
    assert w.status.value == ""


def test_animate_button_drives_the_animator() -> None:
    scheduler = ManualFrameScheduler()
    chart = CalculusChart(config=SMALL, scheduler=scheduler)
    w = ChartWidget(chart)

    w.animation_target.value = "amplitude"
    w.animate_button.value = True
    scheduler.tick(2)

    assert chart.state.animating
    assert w.sliders["amplitude"].value == chart.state.parameters.amplitude
    w.animate_button.value = False
    assert not chart.animating


def test_close_removes_the_chart_hook() -> None:
    chart, w = _widget()
    hook_id = w._hook_id

    w.close()

    assert hook_id not in chart._hooks


def test_chart_displays_its_widget() -> None:
    chart = CalculusChart(config=SMALL, scheduler=ManualFrameScheduler())
    chart_module = importlib.import_module("calcviz.CalculusChart")
    with patch.object(chart_module, "display") as display:
        chart._ipython_display_()

    (shown,), _ = display.call_args
    assert isinstance(shown, ChartWidget)
    assert shown.chart is chart
