"""Gradient color mapping for derivative-colored curves.

Each value of a series is normalized against the finite min/max of that same
series and mapped linearly, channel by channel, between two RGB color stops.
The output is one ``"rgb(r,g,b)"`` string per input value, ready to be used
as a stroke color.

Degenerate inputs never produce invalid color strings:

- a constant series (zero range) maps every value to ``min_color``,
- a series without finite values maps every value to ``min_color``,
- ``+inf`` maps to ``max_color``; ``-inf`` and ``NaN`` map to ``min_color``.

Examples
--------
>>> generate_gradient_colors([0, 10])
['rgb(0,0,255)', 'rgb(255,0,0)']
>>> generate_gradient_colors([5, 5, 5])
['rgb(0,0,255)', 'rgb(0,0,255)', 'rgb(0,0,255)']
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError

ColorStop = Tuple[int, int, int]

DEFAULT_MIN_COLOR: ColorStop = (0, 0, 255)
DEFAULT_MAX_COLOR: ColorStop = (255, 0, 0)


def validate_color_stop(color: Sequence[int], *, name: str = "color") -> ColorStop:
    """Return ``color`` as an RGB triple of ints in ``0..255``.

    Raises
    ------
    ConfigurationError
        If ``color`` does not have three integer channels in range.
    """
    try:
        channels = tuple(color)
    except TypeError as exc:
        raise ConfigurationError(f"{name} must be an (r, g, b) triple, got {color!r}") from exc
    if len(channels) != 3:
        raise ConfigurationError(f"{name} must be an (r, g, b) triple, got {color!r}")
    out = []
    for c in channels:
        try:
            v = float(c)
        except (TypeError, ValueError):
            v = float("nan")
        if isinstance(c, (bool, str)) or not v.is_integer() or not 0 <= v <= 255:
            raise ConfigurationError(f"{name} channels must be integers in 0..255, got {color!r}")
        out.append(int(v))
    return (out[0], out[1], out[2])


def format_rgb(color: Sequence[int]) -> str:
    r, g, b = color
    return f"rgb({int(r)},{int(g)},{int(b)})"


def normalize_values(values: Iterable[float]) -> np.ndarray:
    """Map values to ``[0, 1]`` against the finite min/max of the series.

    Zero range and all-non-finite input map to ``0``. Non-finite entries map
    to ``1`` for ``+inf`` and ``0`` otherwise.
    """
    arr = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
    out = np.zeros(arr.shape, dtype=float)
    finite = np.isfinite(arr)
    if finite.any():
        lo = float(arr[finite].min())
        hi = float(arr[finite].max())
        span = hi - lo
        if span > 0:
            out[finite] = (arr[finite] - lo) / span
    out[np.isposinf(arr)] = 1.0
    return np.clip(out, 0.0, 1.0)


def _interpolate_channels(t: np.ndarray, min_color: ColorStop, max_color: ColorStop) -> np.ndarray:
    lo = np.asarray(min_color, dtype=float)
    hi = np.asarray(max_color, dtype=float)
    # Round half up, matching how the colors are specified for screen output.
    return np.floor(lo + t[:, None] * (hi - lo) + 0.5).astype(int)


def interpolate_color(t: float, min_color: ColorStop = DEFAULT_MIN_COLOR, max_color: ColorStop = DEFAULT_MAX_COLOR) -> str:
    """Color at position ``t`` (clipped to ``[0, 1]``) between two stops."""
    tt = np.clip(np.asarray([t], dtype=float), 0.0, 1.0)
    tt[~np.isfinite(tt)] = 0.0
    return format_rgb(_interpolate_channels(tt, min_color, max_color)[0])


def generate_gradient_colors(
    values: Iterable[float],
    min_color: Sequence[int] = DEFAULT_MIN_COLOR,
    max_color: Sequence[int] = DEFAULT_MAX_COLOR,
) -> list[str]:
    """Return one ``"rgb(r,g,b)"`` color per value.

    Parameters
    ----------
    values : iterable of float
        Series to color, typically derivative values.
    min_color, max_color : (int, int, int)
        Colors of the smallest and largest finite values.

    Returns
    -------
    list[str]
        Same length as ``values``.
    """
    lo = validate_color_stop(min_color, name="min_color")
    hi = validate_color_stop(max_color, name="max_color")
    t = normalize_values(values)
    if t.size == 0:
        return []
    return [format_rgb(rgb) for rgb in _interpolate_channels(t.ravel(), lo, hi)]


__all__ = [
    "ColorStop",
    "DEFAULT_MAX_COLOR",
    "DEFAULT_MIN_COLOR",
    "format_rgb",
    "generate_gradient_colors",
    "interpolate_color",
    "normalize_values",
    "validate_color_stop",
]
