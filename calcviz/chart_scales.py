"""Linear scales and axis extents for the chart.

``LinearScale`` maps a data interval onto a pixel interval (and back). The
y-extent helpers derive the vertical data interval from the visible series,
ignoring non-finite samples so a single pole cannot make the whole chart
range non-finite.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Tuple

import numpy as np

Interval = Tuple[float, float]

FALLBACK_EXTENT: Interval = (-1.0, 1.0)


@dataclass(frozen=True)
class LinearScale:
    """Affine map from ``domain`` to ``range``; ``range`` may be inverted.

    Examples
    --------
    >>> s = LinearScale((-10.0, 10.0), (0.0, 700.0))
    >>> s(0.0)
    350.0
    >>> s.invert(700.0)
    10.0
    """

    domain: Interval
    range: Interval

    def __post_init__(self) -> None:
        d0, d1 = (float(v) for v in self.domain)
        if d0 == d1:
            raise ValueError(f"LinearScale domain must have nonzero width, got {self.domain!r}")
        object.__setattr__(self, "domain", (d0, d1))
        object.__setattr__(self, "range", tuple(float(v) for v in self.range))

    @property
    def _slope(self) -> float:
        (d0, d1), (r0, r1) = self.domain, self.range
        return (r1 - r0) / (d1 - d0)

    def __call__(self, value: Any) -> Any:
        out = self.range[0] + (np.asarray(value, dtype=float) - self.domain[0]) * self._slope
        return float(out) if np.ndim(out) == 0 else out

    def invert(self, pixel: Any) -> Any:
        (d0, d1), (r0, r1) = self.domain, self.range
        if r0 == r1:
            raise ValueError("Cannot invert a scale with a zero-width range")
        out = d0 + (np.asarray(pixel, dtype=float) - r0) * (d1 - d0) / (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out

    def ticks(self, count: int = 10) -> list[float]:
        return nice_ticks(min(self.domain), max(self.domain), count)


def tick_increment(start: float, stop: float, count: int) -> float:
    """Round step (1, 2 or 5 times a power of ten) giving about ``count`` ticks."""
    raw = (stop - start) / max(int(count), 1)
    if raw <= 0 or not math.isfinite(raw):
        return 0.0
    power = math.floor(math.log10(raw))
    error = raw / 10**power
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * 10.0**power


def nice_ticks(start: float, stop: float, count: int = 10) -> list[float]:
    """Evenly spaced round tick values inside ``[start, stop]``.

    >>> nice_ticks(-10, 10, 10)
    [-10.0, -8.0, -6.0, -4.0, -2.0, 0.0, 2.0, 4.0, 6.0, 8.0, 10.0]
    """
    inc = tick_increment(start, stop, count)
    if inc == 0:
        return [float(start)] if start == stop and math.isfinite(start) else []
    first = math.ceil(start / inc)
    last = math.floor(stop / inc)
    digits = max(0, -math.floor(math.log10(inc))) + 1
    return [round(i * inc, digits) + 0.0 for i in range(first, last + 1)]


def finite_extent(values: Iterable[Any]) -> Interval | None:
    """Min and max over the finite entries of all arrays, or ``None``."""
    lo = math.inf
    hi = -math.inf
    for arr in values:
        a = np.asarray(arr, dtype=float)
        a = a[np.isfinite(a)]
        if a.size:
            lo = min(lo, float(a.min()))
            hi = max(hi, float(a.max()))
    if lo > hi:
        return None
    return (lo, hi)


def padded_extent(values: Iterable[Any], padding_fraction: float = 0.1) -> Interval:
    """Finite extent widened by ``padding_fraction`` of its width on both sides.

    A zero-width extent widens by ``1`` on both sides; no finite data yields
    :data:`FALLBACK_EXTENT`.
    """
    extent = finite_extent(values)
    if extent is None:
        return FALLBACK_EXTENT
    lo, hi = extent
    if hi == lo:
        return (lo - 1.0, hi + 1.0)
    pad = (hi - lo) * padding_fraction
    return (lo - pad, hi + pad)


__all__ = [
    "FALLBACK_EXTENT",
    "LinearScale",
    "finite_extent",
    "nice_ticks",
    "padded_extent",
    "tick_increment",
]
