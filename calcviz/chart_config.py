"""Chart configuration record and its validation.

``ChartConfig`` collects every tunable of the chart pipeline in one frozen
value: surface size and margins, sampling resolution, numerical step sizes,
gradient color stops and animation cadence. Values may be given as numbers
or as expression strings (``"2*pi"``), which are parsed with
:func:`calcviz.InputConvert.InputConvert`.

Invalid values raise :class:`calcviz.errors.ConfigurationError` at
construction time, so a config that exists is always usable.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Tuple

from .errors import ConfigurationError
from .gradient import DEFAULT_MAX_COLOR, DEFAULT_MIN_COLOR, ColorStop, validate_color_stop
from .InputConvert import InputConvert
from .numeric_operations import DEFAULT_DERIVATIVE_STEP, DEFAULT_SECOND_DERIVATIVE_STEP
from .sampling import DEFAULT_INTEGRAL_SUBDIVISIONS, DEFAULT_STEPS, MAX_INTEGRAL_EVALUATIONS

DEFAULT_ANIMATION_STEPS: Dict[str, float] = {"amplitude": 0.05, "frequency": 0.02, "phase": 0.05}


@dataclass(frozen=True)
class Margins:
    """Pixel margins between the surface edge and the plot area."""

    top: float = 40
    right: float = 40
    bottom: float = 60
    left: float = 60

    def __post_init__(self) -> None:
        for f in fields(self):
            value = _coerce_real(getattr(self, f.name), f"margins.{f.name}")
            if value < 0:
                raise ConfigurationError(f"margins.{f.name} must be >= 0, got {value!r}")
            object.__setattr__(self, f.name, value)


def _coerce_real(value: Any, name: str) -> float:
    try:
        out = InputConvert(value, float, truncate=False)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}") from exc
    if not math.isfinite(out):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return out


def _coerce_positive_int(value: Any, name: str) -> int:
    try:
        out = InputConvert(value, int, truncate=False)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}") from exc
    if out < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return out


@dataclass(frozen=True)
class ChartConfig:
    """Static settings of one chart.

    Parameters
    ----------
    width, height : float
        Surface size in pixels.
    margins : Margins
        Space reserved around the plot area for axes, labels and the title.
    steps : int
        Sampling intervals per series (``steps + 1`` points).
    integral_subdivisions : int
        Trapezoids per cumulative-integral point.
    derivative_step, second_derivative_step : float
        Forward-difference steps ``h``.
    padding_fraction : float
        Fraction of the y-range added above and below the data.
    tangent_half_length : float
        Half-length of the tangent segment, in domain units.
    min_color, max_color : (int, int, int)
        Gradient stops for the derivative-colored function curve.
    animation_steps : mapping
        Per-frame increment for ``amplitude``, ``frequency`` and ``phase``.
    frame_interval_ms : float
        Cadence of the timer-driven animation scheduler.
    use_cache : bool
        Memoize sampled series by function, domain and parameters.
    """

    width: float = 800
    height: float = 500
    margins: Margins = field(default_factory=Margins)
    steps: int = DEFAULT_STEPS
    integral_subdivisions: int = DEFAULT_INTEGRAL_SUBDIVISIONS
    derivative_step: float = DEFAULT_DERIVATIVE_STEP
    second_derivative_step: float = DEFAULT_SECOND_DERIVATIVE_STEP
    padding_fraction: float = 0.1
    tangent_half_length: float = 2.0
    min_color: ColorStop = DEFAULT_MIN_COLOR
    max_color: ColorStop = DEFAULT_MAX_COLOR
    animation_steps: Tuple[Tuple[str, float], ...] = tuple(DEFAULT_ANIMATION_STEPS.items())
    frame_interval_ms: float = 1000.0 / 60.0
    use_cache: bool = False

    def __post_init__(self) -> None:
        set_ = lambda name, value: object.__setattr__(self, name, value)  # noqa: E731

        if isinstance(self.margins, Mapping):
            set_("margins", Margins(**dict(self.margins)))
        elif not isinstance(self.margins, Margins):
            raise ConfigurationError(f"margins must be a Margins or mapping, got {self.margins!r}")

        for name in ("width", "height", "derivative_step", "second_derivative_step", "frame_interval_ms",
                     "tangent_half_length"):
            value = _coerce_real(getattr(self, name), name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {value!r}")
            set_(name, value)

        padding = _coerce_real(self.padding_fraction, "padding_fraction")
        if padding < 0:
            raise ConfigurationError(f"padding_fraction must be >= 0, got {padding!r}")
        set_("padding_fraction", padding)

        set_("steps", _coerce_positive_int(self.steps, "steps"))
        set_("integral_subdivisions", _coerce_positive_int(self.integral_subdivisions, "integral_subdivisions"))
        set_("min_color", validate_color_stop(self.min_color, name="min_color"))
        set_("max_color", validate_color_stop(self.max_color, name="max_color"))

        raw_steps = dict(self.animation_steps)
        unknown = set(raw_steps) - set(DEFAULT_ANIMATION_STEPS)
        if unknown:
            raise ConfigurationError(f"Unknown animation target(s): {', '.join(sorted(unknown))}")
        merged = {**DEFAULT_ANIMATION_STEPS, **{k: _coerce_real(v, f"animation_steps.{k}") for k, v in raw_steps.items()}}
        set_("animation_steps", tuple(merged.items()))
        set_("use_cache", bool(self.use_cache))

        if self.inner_width <= 0 or self.inner_height <= 0:
            raise ConfigurationError(
                f"Margins leave no plot area: inner size {self.inner_width}x{self.inner_height}"
            )

        cost = (self.steps + 1) * self.integral_subdivisions
        if cost > MAX_INTEGRAL_EVALUATIONS:
            warnings.warn(
                f"steps={self.steps} with integral_subdivisions={self.integral_subdivisions} "
                f"costs {cost} evaluations per integral curve; consider smaller values.",
                RuntimeWarning,
                stacklevel=3,
            )

    @property
    def inner_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def inner_height(self) -> float:
        return self.height - self.margins.top - self.margins.bottom

    def animation_step(self, target: str) -> float:
        try:
            return dict(self.animation_steps)[target]
        except KeyError:
            raise ConfigurationError(
                f"Unknown animation target {target!r}; expected one of {tuple(DEFAULT_ANIMATION_STEPS)}"
            ) from None

    def with_updates(self, **changes: Any) -> "ChartConfig":
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ChartConfig":
        """Build a config from a plain mapping (e.g. parsed JSON/TOML).

        ``animation_steps`` may be given as a mapping. Unknown keys raise
        :class:`ConfigurationError`.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")
        kwargs = dict(values)
        if isinstance(kwargs.get("animation_steps"), Mapping):
            kwargs["animation_steps"] = tuple(kwargs["animation_steps"].items())
        return cls(**kwargs)


DEFAULT_CONFIG = ChartConfig()


__all__ = ["ChartConfig", "DEFAULT_ANIMATION_STEPS", "DEFAULT_CONFIG", "Margins"]
