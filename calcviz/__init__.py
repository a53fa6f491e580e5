"""Top-level public API for the ``calcviz`` package.

This module re-exports the notebook-facing surface so users can import from a
single namespace, for example:

>>> from calcviz import CalculusChart, ChartConfig  # doctest: +SKIP

It exposes both the interactive chart and the pure building blocks (sampling,
numerical operations, gradient colors, the reducer and the renderer) for
headless use and testing.
"""

# Optional explicit module handle to avoid callable/module name ambiguity.
from . import numpify as numpify_module
from .animation import (
    FrameScheduler,
    ManualFrameScheduler,
    ParameterAnimator,
    TimerFrameScheduler,
    advance_parameter,
    wrap_phase,
)
from .CalculusChart import CalculusChart
from .chart_config import DEFAULT_CONFIG, ChartConfig, Margins
from .chart_renderer import (
    ChartModel,
    PointerReadout,
    compute_chart,
    draw_chart,
    pointer_readout,
    readout_at,
    render_chart,
)
from .chart_scales import LinearScale, nice_ticks, padded_extent
from .chart_state import TOGGLES, ChartState, reduce_chart_state
from .chart_theme import DARK_THEME, LIGHT_THEME
from .chart_widget import ChartWidget
from .ChartEvent import ChartEvent
from .drawing import DrawingSurface, RecordingSurface, Stroke
from .errors import ConfigurationError
from .function_registry import (
    DEFAULT_PARAMETERS,
    FunctionParameters,
    SampleFunction,
    function_names,
    get_sample_function,
)
from .gradient import ColorStop, generate_gradient_colors
from .InputConvert import InputConvert
from .numeric_operations import derivative, integrate, second_derivative
from .numpify import NumpifiedFunction, numpify, numpify_cached
from .plotly_surface import PlotlySurface
from .sampling import (
    Domain,
    SampleSeries,
    generate_derivative_points,
    generate_function_points,
    generate_integral_points,
    generate_second_derivative_points,
    sample_series,
)

__all__ = [
    "CalculusChart",
    "ChartConfig",
    "ChartEvent",
    "ChartModel",
    "ChartState",
    "ChartWidget",
    "ColorStop",
    "ConfigurationError",
    "DARK_THEME",
    "DEFAULT_CONFIG",
    "DEFAULT_PARAMETERS",
    "Domain",
    "DrawingSurface",
    "FrameScheduler",
    "FunctionParameters",
    "InputConvert",
    "LIGHT_THEME",
    "LinearScale",
    "ManualFrameScheduler",
    "Margins",
    "NumpifiedFunction",
    "ParameterAnimator",
    "PlotlySurface",
    "PointerReadout",
    "RecordingSurface",
    "SampleFunction",
    "SampleSeries",
    "Stroke",
    "TOGGLES",
    "TimerFrameScheduler",
    "advance_parameter",
    "compute_chart",
    "derivative",
    "draw_chart",
    "function_names",
    "generate_derivative_points",
    "generate_function_points",
    "generate_gradient_colors",
    "generate_integral_points",
    "generate_second_derivative_points",
    "get_sample_function",
    "integrate",
    "nice_ticks",
    "numpify",
    "numpify_cached",
    "numpify_module",
    "padded_extent",
    "pointer_readout",
    "readout_at",
    "reduce_chart_state",
    "render_chart",
    "sample_series",
    "second_derivative",
    "wrap_phase",
]
