"""Standardized chart state-transition events.

This module defines ``ChartEvent``, the immutable payload consumed by
:func:`calcviz.chart_state.reduce_chart_state` and forwarded to
:class:`calcviz.CalculusChart.CalculusChart` hooks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

EVENT_KINDS = (
    "toggle",
    "set_toggle",
    "select_function",
    "set_domain",
    "set_parameter",
    "set_parameters",
    "pointer_move",
    "pointer_leave",
    "set_animation",
    "animation_tick",
)


@dataclass(frozen=True)
class ChartEvent:
    """Normalized chart event.

    Parameters
    ----------
    kind : str
        One of :data:`EVENT_KINDS`.
    name : str or None
        Toggle or parameter name the event addresses, if any.
    value : Any
        New value (domain tuple, parameter value, pointer x, ...).
    raw : Any, optional
        Originating widget/traitlets payload, kept for debugging only.

    Examples
    --------
    >>> ChartEvent.toggle("show_grid")
    ChartEvent(kind='toggle', name='show_grid', value=None, raw=None)
    """

    kind: str
    name: Optional[str] = None
    value: Any = None
    raw: Any = None

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown chart event kind {self.kind!r}; expected one of {EVENT_KINDS}")

    @classmethod
    def toggle(cls, name: str, *, raw: Any = None) -> "ChartEvent":
        return cls("toggle", name=name, raw=raw)

    @classmethod
    def set_toggle(cls, name: str, value: bool, *, raw: Any = None) -> "ChartEvent":
        return cls("set_toggle", name=name, value=bool(value), raw=raw)

    @classmethod
    def select_function(cls, name: str, *, raw: Any = None) -> "ChartEvent":
        return cls("select_function", value=name, raw=raw)

    @classmethod
    def set_domain(cls, x_min: Any, x_max: Any, *, raw: Any = None) -> "ChartEvent":
        return cls("set_domain", value=(x_min, x_max), raw=raw)

    @classmethod
    def set_parameter(cls, name: str, value: Any, *, raw: Any = None) -> "ChartEvent":
        return cls("set_parameter", name=name, value=value, raw=raw)

    @classmethod
    def set_parameters(cls, raw: Any = None, **values: Any) -> "ChartEvent":
        return cls("set_parameters", value=dict(values), raw=raw)

    @classmethod
    def pointer_move(cls, x: float, *, raw: Any = None) -> "ChartEvent":
        return cls("pointer_move", value=float(x), raw=raw)

    @classmethod
    def pointer_leave(cls, *, raw: Any = None) -> "ChartEvent":
        return cls("pointer_leave", raw=raw)

    @classmethod
    def set_animation(cls, enabled: bool, target: Optional[str] = None, *, raw: Any = None) -> "ChartEvent":
        return cls("set_animation", name=target, value=bool(enabled), raw=raw)

    @classmethod
    def animation_tick(cls, step: float, *, raw: Any = None) -> "ChartEvent":
        return cls("animation_tick", value=float(step), raw=raw)


__all__ = ["ChartEvent", "EVENT_KINDS"]
