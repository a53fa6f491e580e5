"""Numerical calculus operations used by the chart pipeline.

Includes forward-difference first and second derivatives and the composite
trapezoidal rule. Every routine works on plain Python callables as well as on
vectorized NumPy callables such as :meth:`SampleFunction.bind` results.

None of these functions raise on non-finite function values: a pole or a
discontinuity yields a large or non-finite estimate, and callers decide how
to present it.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np

DEFAULT_DERIVATIVE_STEP = 1e-4
DEFAULT_SECOND_DERIVATIVE_STEP = 1e-3
DEFAULT_INTEGRATION_INTERVALS = 1000

RealFunction = Callable[[Any], Any]


def evaluate_on_grid(f: RealFunction, xs: np.ndarray) -> np.ndarray:
    """Evaluate ``f`` at every point of ``xs`` and return a float array.

    Vectorized callables are called once with the whole array. Callables that
    reject arrays (e.g. ones built on :mod:`math`) or return a single value
    for array input fall back to point-wise evaluation.
    """
    xs = np.asarray(xs, dtype=float)
    with np.errstate(all="ignore"):
        try:
            values = np.asarray(f(xs), dtype=float)
        except (TypeError, ValueError):
            values = None
        if values is not None and values.shape == xs.shape:
            return values
        return np.fromiter((f(float(x)) for x in xs.ravel()), dtype=float, count=xs.size).reshape(xs.shape)


def derivative(f: RealFunction, x: Any, h: float = DEFAULT_DERIVATIVE_STEP) -> Any:
    """Forward-difference estimate ``(f(x + h) - f(x)) / h``.

    Parameters
    ----------
    f : callable
        Real function of one variable.
    x : float or numpy.ndarray
        Evaluation point(s). Arrays require a vectorized ``f``.
    h : float, default=1e-4
        Step size. The truncation error is ``O(h)``.

    Raises
    ------
    ValueError
        If ``h`` is zero.
    """
    if h == 0:
        raise ValueError("derivative step h must be nonzero")
    with np.errstate(all="ignore"):
        return (f(x + h) - f(x)) / h


def second_derivative(f: RealFunction, x: Any, h: float = DEFAULT_SECOND_DERIVATIVE_STEP) -> Any:
    """Forward difference of the forward-difference derivative.

    Equals ``(f(x + 2h) - 2 f(x + h) + f(x)) / h**2``. The default step is
    larger than :func:`derivative`'s because round-off grows like ``1/h**2``.
    """
    if h == 0:
        raise ValueError("derivative step h must be nonzero")
    return derivative(lambda t: derivative(f, t, h), x, h)


def integrate(f: RealFunction, a: float, b: float, n: int = DEFAULT_INTEGRATION_INTERVALS) -> float:
    """Composite trapezoidal estimate of the integral of ``f`` over ``[a, b]``.

    Uses ``n`` equal subintervals: the endpoints carry weight ``0.5`` and the
    ``n - 1`` interior points weight ``1``. Reversed bounds give the negated
    forward integral, so ``integrate(f, a, b) == -integrate(f, b, a)``.

    Raises
    ------
    ValueError
        If ``n`` is smaller than 1.
    """
    n = int(n)
    if n < 1:
        raise ValueError(f"integrate needs at least one subinterval, got n={n}")
    a = float(a)
    b = float(b)
    if a == b:
        return 0.0
    if a > b:
        return -integrate(f, b, a, n)

    step = (b - a) / n
    interior = evaluate_on_grid(f, a + step * np.arange(1, n, dtype=float))
    with np.errstate(all="ignore"):
        total = 0.5 * (float(f(a)) + float(f(b))) + float(np.sum(interior))
        # (b - a) * (total / n) equals total * step and keeps constants exact.
        return (b - a) * (total / n)


__all__ = [
    "DEFAULT_DERIVATIVE_STEP",
    "DEFAULT_INTEGRATION_INTERVALS",
    "DEFAULT_SECOND_DERIVATIVE_STEP",
    "derivative",
    "evaluate_on_grid",
    "integrate",
    "second_derivative",
]
