"""Point sampling of functions, derivatives and cumulative integrals.

Purpose
-------
Turns a real function and a :class:`Domain` into evenly spaced series that
the renderer draws. All series produced for one chart share the same x-grid
of ``steps + 1`` points (both endpoints included), so function, derivative,
second-derivative and integral values align by index.

Architecture notes
------------------
- :func:`generate_function_points`, :func:`generate_derivative_points`,
  :func:`generate_second_derivative_points` and
  :func:`generate_integral_points` work on any callable.
- :func:`sample_series` builds the whole :class:`SeriesBundle` for a registry
  function; :func:`sample_series_cached` memoizes it by
  ``(function, domain, parameters, steps, ...)``. Cached arrays are read-only.

Important gotchas
-----------------
- The cumulative integral recomputes each point's integral from ``x_min``,
  costing ``steps * subdivisions`` evaluations. Costs above
  :data:`MAX_INTEGRAL_EVALUATIONS` emit a :class:`RuntimeWarning`.
- Non-finite samples (poles, undefined logarithms) are kept as-is. Consumers
  that compute ranges must mask them (see :meth:`SampleSeries.finite_values`).
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np

from .errors import ConfigurationError
from .function_registry import DEFAULT_PARAMETERS, FunctionParameters, SampleFunction, get_sample_function
from .InputConvert import InputConvert
from .numeric_operations import (
    DEFAULT_DERIVATIVE_STEP,
    DEFAULT_SECOND_DERIVATIVE_STEP,
    RealFunction,
    derivative,
    evaluate_on_grid,
    integrate,
    second_derivative,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_STEPS = 200
DEFAULT_INTEGRAL_SUBDIVISIONS = 100
MAX_INTEGRAL_EVALUATIONS = 200_000

Points = Tuple[np.ndarray, np.ndarray]


@dataclass(frozen=True)
class Domain:
    """Sampling interval ``(x_min, x_max)`` with ``x_min < x_max``.

    Bounds accept numbers or expression strings such as ``"-pi"``.

    Raises
    ------
    ConfigurationError
        If a bound is not a finite real number or ``x_min >= x_max``.
    """

    x_min: float
    x_max: float

    def __post_init__(self) -> None:
        try:
            x_min = InputConvert(self.x_min, float, truncate=False)
            x_max = InputConvert(self.x_max, float, truncate=False)
        except ValueError as exc:
            raise ConfigurationError(f"Domain bounds must be real numbers, got ({self.x_min!r}, {self.x_max!r})") from exc
        if not (math.isfinite(x_min) and math.isfinite(x_max)):
            raise ConfigurationError(f"Domain bounds must be finite, got ({x_min!r}, {x_max!r})")
        if x_min >= x_max:
            raise ConfigurationError(f"Domain requires x_min < x_max, got ({x_min!r}, {x_max!r})")
        object.__setattr__(self, "x_min", x_min)
        object.__setattr__(self, "x_max", x_max)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    def clamp(self, x: float) -> float:
        return min(max(float(x), self.x_min), self.x_max)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x_min, self.x_max)


@dataclass(frozen=True, eq=False)
class SampleSeries:
    """Ordered ``(x, y)`` samples on a strictly increasing grid."""

    name: str
    x: np.ndarray
    y: np.ndarray

    def __len__(self) -> int:
        return int(self.x.shape[0])

    def points(self) -> list[tuple[float, float]]:
        return [(float(a), float(b)) for a, b in zip(self.x, self.y)]

    @property
    def finite_mask(self) -> np.ndarray:
        return np.isfinite(self.y)

    def finite_values(self) -> np.ndarray:
        return self.y[self.finite_mask]


@dataclass(frozen=True, eq=False)
class SeriesBundle:
    """All series of one chart, sharing :attr:`x`."""

    function: SampleSeries
    derivative: SampleSeries
    second_derivative: Optional[SampleSeries] = None
    integral: Optional[SampleSeries] = None

    @property
    def x(self) -> np.ndarray:
        return self.function.x


def _validate_steps(steps: int) -> int:
    try:
        value = InputConvert(steps, int, truncate=False)
    except ValueError as exc:
        raise ConfigurationError(f"steps must be a positive integer, got {steps!r}") from exc
    if value < 1:
        raise ConfigurationError(f"steps must be a positive integer, got {steps!r}")
    return value


def sample_grid(x_min: float, x_max: float, steps: int = DEFAULT_STEPS) -> np.ndarray:
    """Return ``steps + 1`` evenly spaced points from ``x_min`` to ``x_max`` inclusive."""
    domain = Domain(x_min, x_max)
    n = _validate_steps(steps)
    return np.linspace(domain.x_min, domain.x_max, n + 1)


def generate_function_points(f: RealFunction, x_min: float, x_max: float, steps: int = DEFAULT_STEPS) -> Points:
    """Sample ``f`` on ``steps`` equal intervals of ``[x_min, x_max]``.

    Returns
    -------
    (numpy.ndarray, numpy.ndarray)
        ``steps + 1`` x-values (endpoints included) and ``f`` at each.

    Examples
    --------
    >>> xs, ys = generate_function_points(lambda x: 2 * x, -5, 5, 10)
    >>> float(xs[0]), float(xs[-1]), len(xs)
    (-5.0, 5.0, 11)
    """
    xs = sample_grid(x_min, x_max, steps)
    return xs, evaluate_on_grid(f, xs)


def generate_derivative_points(
    f: RealFunction,
    x_min: float,
    x_max: float,
    steps: int = DEFAULT_STEPS,
    h: float = DEFAULT_DERIVATIVE_STEP,
) -> Points:
    """Forward-difference derivative of ``f`` on the same grid as :func:`generate_function_points`."""
    xs = sample_grid(x_min, x_max, steps)
    return xs, evaluate_on_grid(lambda t: derivative(f, t, h), xs)


def generate_second_derivative_points(
    f: RealFunction,
    x_min: float,
    x_max: float,
    steps: int = DEFAULT_STEPS,
    h: float = DEFAULT_SECOND_DERIVATIVE_STEP,
) -> Points:
    xs = sample_grid(x_min, x_max, steps)
    return xs, evaluate_on_grid(lambda t: second_derivative(f, t, h), xs)


def generate_integral_points(
    f: RealFunction,
    x_min: float,
    x_max: float,
    steps: int = DEFAULT_STEPS,
    subdivisions: int = DEFAULT_INTEGRAL_SUBDIVISIONS,
) -> Points:
    """Cumulative integral ``F(x) = ∫_{x_min}^{x} f`` at every grid point.

    Each point is integrated from scratch with ``subdivisions`` trapezoids,
    so ``F(x_min) == 0``.
    """
    xs = sample_grid(x_min, x_max, steps)
    cost = len(xs) * int(subdivisions)
    if cost > MAX_INTEGRAL_EVALUATIONS:
        warnings.warn(
            f"Cumulative integral needs {cost} function evaluations "
            f"({len(xs)} points x {subdivisions} subdivisions); rendering may be slow.",
            RuntimeWarning,
            stacklevel=2,
        )
    lower = float(xs[0])
    ys = np.array([integrate(f, lower, float(x), subdivisions) for x in xs], dtype=float)
    return xs, ys


def sample_series(
    function: SampleFunction | str,
    domain: Domain,
    parameters: FunctionParameters = DEFAULT_PARAMETERS,
    *,
    steps: int = DEFAULT_STEPS,
    subdivisions: int = DEFAULT_INTEGRAL_SUBDIVISIONS,
    h: float = DEFAULT_DERIVATIVE_STEP,
    h2: float = DEFAULT_SECOND_DERIVATIVE_STEP,
    include_second_derivative: bool = True,
    include_integral: bool = True,
) -> SeriesBundle:
    """Sample a registry function and the series derived from it.

    The derivative series is always produced because the gradient colors of
    the function curve depend on it.
    """
    fn = get_sample_function(function) if isinstance(function, str) else function
    f = fn.bind(parameters)
    lo, hi = domain.x_min, domain.x_max

    xs, ys = generate_function_points(f, lo, hi, steps)
    _, dys = generate_derivative_points(f, lo, hi, steps, h)
    bundle_second = None
    if include_second_derivative:
        _, d2ys = generate_second_derivative_points(f, lo, hi, steps, h2)
        bundle_second = SampleSeries("second_derivative", xs, d2ys)
    bundle_integral = None
    if include_integral:
        _, iys = generate_integral_points(f, lo, hi, steps, subdivisions)
        bundle_integral = SampleSeries("integral", xs, iys)

    return SeriesBundle(
        function=SampleSeries("function", xs, ys),
        derivative=SampleSeries("derivative", xs, dys),
        second_derivative=bundle_second,
        integral=bundle_integral,
    )


@lru_cache(maxsize=64)
def _sample_series_cached_impl(
    name: str,
    domain: Domain,
    parameters: FunctionParameters,
    steps: int,
    subdivisions: int,
    h: float,
    h2: float,
    include_second_derivative: bool,
    include_integral: bool,
) -> SeriesBundle:
    logger.debug("sample_series_cached: cache MISS (%s, %s, %s, steps=%d)", name, domain, parameters, steps)
    bundle = sample_series(
        name,
        domain,
        parameters,
        steps=steps,
        subdivisions=subdivisions,
        h=h,
        h2=h2,
        include_second_derivative=include_second_derivative,
        include_integral=include_integral,
    )
    for series in (bundle.function, bundle.derivative, bundle.second_derivative, bundle.integral):
        if series is not None:
            series.x.setflags(write=False)
            series.y.setflags(write=False)
    return bundle


def sample_series_cached(
    name: str,
    domain: Domain,
    parameters: FunctionParameters = DEFAULT_PARAMETERS,
    *,
    steps: int = DEFAULT_STEPS,
    subdivisions: int = DEFAULT_INTEGRAL_SUBDIVISIONS,
    h: float = DEFAULT_DERIVATIVE_STEP,
    h2: float = DEFAULT_SECOND_DERIVATIVE_STEP,
    include_second_derivative: bool = True,
    include_integral: bool = True,
) -> SeriesBundle:
    """Memoized :func:`sample_series` keyed by registry name and settings.

    Clear with ``sample_series_cached.cache_clear()``.
    """
    return _sample_series_cached_impl(
        name,
        domain,
        parameters,
        int(steps),
        int(subdivisions),
        float(h),
        float(h2),
        bool(include_second_derivative),
        bool(include_integral),
    )


sample_series_cached.cache_info = _sample_series_cached_impl.cache_info  # type: ignore[attr-defined]
sample_series_cached.cache_clear = _sample_series_cached_impl.cache_clear  # type: ignore[attr-defined]


__all__ = [
    "DEFAULT_INTEGRAL_SUBDIVISIONS",
    "DEFAULT_STEPS",
    "Domain",
    "MAX_INTEGRAL_EVALUATIONS",
    "SampleSeries",
    "SeriesBundle",
    "generate_derivative_points",
    "generate_function_points",
    "generate_integral_points",
    "generate_second_derivative_points",
    "sample_grid",
    "sample_series",
    "sample_series_cached",
]
