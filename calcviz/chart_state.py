"""Immutable chart view state and the reducer that evolves it.

Purpose
-------
``ChartState`` is the renderer's whole view state: selected function, domain,
shape parameters, the boolean toggles, the pointer position and the animation
settings. It is a frozen value. Every user action is a
:class:`~calcviz.ChartEvent.ChartEvent`, and :func:`reduce_chart_state` maps
``(state, event)`` to a new state without touching the old one.

Invariants
----------
- The function name is registered and the domain satisfies ``x_min < x_max``;
  a rejected event raises before any state is built.
- Each toggle gates exactly one draw step, so toggles commute.
- ``pointer_x`` is either ``None`` or inside the domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .animation import advance_parameter
from .ChartEvent import ChartEvent
from .errors import ConfigurationError
from .function_registry import DEFAULT_PARAMETERS, PARAMETER_NAMES, FunctionParameters, get_sample_function
from .sampling import Domain

TOGGLES = (
    "show_derivative",
    "show_second_derivative",
    "show_integral",
    "show_area",
    "show_grid",
    "show_points",
    "show_tangent",
    "dark_mode",
    "gradient",
)


@dataclass(frozen=True)
class ChartState:
    """Frozen view state of one chart.

    Defaults mirror the original widget: the sine function on ``[-10, 10]``
    with derivative and integral curves shown and a derivative-colored
    function curve.
    """

    function_name: str = "sine"
    domain: Domain = field(default_factory=lambda: Domain(-10.0, 10.0))
    parameters: FunctionParameters = DEFAULT_PARAMETERS
    show_derivative: bool = True
    show_second_derivative: bool = False
    show_integral: bool = True
    show_area: bool = False
    show_grid: bool = False
    show_points: bool = False
    show_tangent: bool = False
    dark_mode: bool = False
    gradient: bool = True
    pointer_x: Optional[float] = None
    animating: bool = False
    animation_target: str = "phase"

    def __post_init__(self) -> None:
        get_sample_function(self.function_name)
        if not isinstance(self.domain, Domain):
            object.__setattr__(self, "domain", Domain(*self.domain))
        if isinstance(self.parameters, Mapping):
            object.__setattr__(self, "parameters", FunctionParameters.from_mapping(self.parameters))
        if self.animation_target not in PARAMETER_NAMES:
            raise ConfigurationError(
                f"Unknown animation target {self.animation_target!r}; expected one of {PARAMETER_NAMES}"
            )
        for name in TOGGLES:
            object.__setattr__(self, name, bool(getattr(self, name)))
        if self.pointer_x is not None:
            object.__setattr__(self, "pointer_x", self.domain.clamp(self.pointer_x))

    @property
    def function(self):
        return get_sample_function(self.function_name)

    def toggles(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in TOGGLES}


def _require_toggle(name: Optional[str]) -> str:
    if name not in TOGGLES:
        raise ConfigurationError(f"Unknown toggle {name!r}; expected one of {TOGGLES}")
    return name


def reduce_chart_state(state: ChartState, event: ChartEvent) -> ChartState:
    """Return the state that results from applying ``event`` to ``state``.

    Raises
    ------
    ConfigurationError
        For unknown toggles/parameters, degenerate domains and invalid values.
    KeyError
        For unknown function names.
    """
    kind = event.kind
    if kind == "toggle":
        name = _require_toggle(event.name)
        return replace(state, **{name: not getattr(state, name)})

    if kind == "set_toggle":
        name = _require_toggle(event.name)
        return replace(state, **{name: bool(event.value)})

    if kind == "select_function":
        get_sample_function(event.value)
        return replace(state, function_name=event.value)

    if kind == "set_domain":
        x_min, x_max = event.value
        return replace(state, domain=Domain(x_min, x_max))

    if kind == "set_parameter":
        return replace(state, parameters=state.parameters.with_value(event.name, event.value))

    if kind == "set_parameters":
        merged: dict[str, Any] = {**state.parameters.as_dict(), **dict(event.value)}
        return replace(state, parameters=FunctionParameters.from_mapping(merged))

    if kind == "pointer_move":
        return replace(state, pointer_x=state.domain.clamp(event.value))

    if kind == "pointer_leave":
        return replace(state, pointer_x=None)

    if kind == "set_animation":
        target = event.name or state.animation_target
        return replace(state, animating=bool(event.value), animation_target=target)

    if kind == "animation_tick":
        if not state.animating:
            return state
        return replace(
            state,
            parameters=advance_parameter(state.parameters, state.animation_target, event.value),
        )

    raise ConfigurationError(f"Unhandled chart event kind {kind!r}")


__all__ = ["ChartState", "TOGGLES", "reduce_chart_state"]
