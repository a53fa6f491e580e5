from __future__ import annotations

import math

import numpy as np
import pytest

from calcviz.chart_scales import FALLBACK_EXTENT, LinearScale, finite_extent, nice_ticks, padded_extent, tick_increment


def test_linear_scale_maps_and_inverts() -> None:
    s = LinearScale((-10.0, 10.0), (0.0, 700.0))

    assert s(-10.0) == 0.0
    assert s(0.0) == 350.0
    assert s.invert(350.0) == 0.0
    np.testing.assert_allclose(s(np.array([-10.0, 10.0])), [0.0, 700.0])


def test_inverted_range_for_y_axis() -> None:
    s = LinearScale((-2.0, 2.0), (400.0, 0.0))

    assert s(2.0) == 0.0
    assert s(-2.0) == 400.0
    assert s.invert(100.0) == pytest.approx(1.0)


def test_zero_width_domain_is_rejected() -> None:
    with pytest.raises(ValueError):
        LinearScale((1.0, 1.0), (0.0, 10.0))


def test_nice_ticks() -> None:
    assert nice_ticks(-10, 10, 10) == [-10.0, -8.0, -6.0, -4.0, -2.0, 0.0, 2.0, 4.0, 6.0, 8.0, 10.0]
    assert nice_ticks(0, 1, 5) == [0.0, 0.2, 0.4, 0.6, 0.8, 1.0]
    assert nice_ticks(-math.pi, math.pi, 10)[0] == -3.0
    assert tick_increment(0, 100, 10) == 10.0


def test_finite_extent_ignores_non_finite_values() -> None:
    assert finite_extent([np.array([1.0, np.inf, -3.0]), [np.nan, 2.0]]) == (-3.0, 2.0)
    assert finite_extent([[np.nan], [np.inf]]) is None


def test_padded_extent_adds_ten_percent() -> None:
    assert padded_extent([[0.0, 10.0]]) == (-1.0, 11.0)


def test_padded_extent_degenerate_cases() -> None:
    assert padded_extent([[3.0, 3.0]]) == (2.0, 4.0)
    assert padded_extent([[np.nan, np.inf]]) == FALLBACK_EXTENT
    assert padded_extent([]) == FALLBACK_EXTENT
