"""Property-based checks for the numerical core, colors, scales and reducer.

These complement the example-based tests with randomized inputs around the
edge cases that matter for rendering: constant and non-finite series,
arbitrary integration bounds and arbitrary toggle sequences.
"""

from __future__ import annotations

import math
import re

import numpy as np
import pytest

from calcviz.chart_scales import LinearScale, padded_extent
from calcviz.chart_state import TOGGLES, ChartState, reduce_chart_state
from calcviz.ChartEvent import ChartEvent
from calcviz.gradient import generate_gradient_colors
from calcviz.numeric_operations import derivative, integrate
from calcviz.sampling import generate_function_points

try:
    from hypothesis import given, settings
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


RGB = re.compile(r"^rgb\((\d{1,3}),(\d{1,3}),(\d{1,3})\)$")
BOUNDS = st.floats(min_value=-1e3, max_value=1e3, allow_nan=False, allow_infinity=False)
SERIES_VALUES = st.one_of(
    st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False),
    st.just(math.nan),
    st.just(math.inf),
    st.just(-math.inf),
)


@given(a=BOUNDS, b=BOUNDS, n=st.integers(min_value=1, max_value=200))
def test_integral_of_one_is_exact(a: float, b: float, n: int) -> None:
    result = integrate(lambda x: 1.0, a, b, n)
    if a <= b:
        assert result == b - a
    else:
        assert result == -(a - b)


@given(a=BOUNDS, b=BOUNDS, n=st.integers(min_value=1, max_value=50))
def test_integral_antisymmetry(a: float, b: float, n: int) -> None:
    f = lambda x: x * x - 2.0 * x  # noqa: E731
    assert integrate(f, a, b, n) == -integrate(f, b, a, n)


@given(
    c=st.tuples(*(st.floats(min_value=-5, max_value=5) for _ in range(3))),
    x=st.floats(min_value=-10, max_value=10),
)
def test_forward_difference_error_of_quadratics_is_linear_in_h(c, x) -> None:
    a2, a1, a0 = c
    f = lambda t: a2 * t * t + a1 * t + a0  # noqa: E731
    exact = 2.0 * a2 * x + a1
    h = 1e-3
    # Truncation error is exactly a2*h; allow for round-off in the difference.
    assert abs(derivative(f, x, h) - exact) <= abs(a2) * h + 1e-8


@given(values=st.lists(SERIES_VALUES, max_size=40))
def test_gradient_colors_are_always_valid_rgb(values) -> None:
    colors = generate_gradient_colors(values)

    assert len(colors) == len(values)
    for color in colors:
        m = RGB.match(color)
        assert m is not None
        assert all(0 <= int(ch) <= 255 for ch in m.groups())


@given(value=st.floats(allow_nan=False, allow_infinity=False, min_value=-1e9, max_value=1e9), n=st.integers(1, 20))
def test_constant_series_maps_to_single_color(value: float, n: int) -> None:
    assert set(generate_gradient_colors([value] * n)) == {"rgb(0,0,255)"}


@given(
    lo=st.floats(min_value=-100, max_value=100),
    width=st.floats(min_value=1e-3, max_value=100),
    steps=st.integers(min_value=1, max_value=500),
)
def test_sample_grid_is_strictly_increasing_with_exact_endpoints(lo: float, width: float, steps: int) -> None:
    hi = lo + width
    if not hi > lo:
        return
    xs, _ = generate_function_points(lambda x: x, lo, hi, steps)

    assert len(xs) == steps + 1
    assert xs[0] == lo
    assert xs[-1] == hi
    assert np.all(np.diff(xs) > 0)


@given(values=st.lists(SERIES_VALUES, max_size=30))
def test_padded_extent_is_finite_and_nondegenerate(values) -> None:
    lo, hi = padded_extent([np.asarray(values, dtype=float)])

    assert math.isfinite(lo) and math.isfinite(hi)
    assert lo < hi


@given(
    d=st.tuples(BOUNDS, st.floats(min_value=1e-3, max_value=1e3)),
    px=st.floats(min_value=0, max_value=700),
)
def test_linear_scale_round_trip(d, px: float) -> None:
    lo, width = d
    scale = LinearScale((lo, lo + width), (0.0, 700.0))
    assert scale(scale.invert(px)) == pytest.approx(px, abs=1e-6)


@settings(max_examples=50, deadline=None)
@given(sequence=st.lists(st.sampled_from(TOGGLES), max_size=12))
def test_toggle_sequences_only_depend_on_parity(sequence) -> None:
    state = ChartState()
    for name in sequence:
        state = reduce_chart_state(state, ChartEvent.toggle(name))

    for name in TOGGLES:
        flipped = sequence.count(name) % 2 == 1
        assert getattr(state, name) == (getattr(ChartState(), name) != flipped)
