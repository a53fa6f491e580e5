from __future__ import annotations

import math

import numpy as np
import pytest

from calcviz.numeric_operations import derivative, evaluate_on_grid, integrate, second_derivative


@pytest.mark.parametrize(
    "f, df, curvature",
    [
        (lambda x: 3.0, lambda x: 0.0, 0.0),
        (lambda x: 2.0 * x - 1.0, lambda x: 2.0, 0.0),
        (lambda x: x * x - 3.0 * x + 2.0, lambda x: 2.0 * x - 3.0, 1.0),
    ],
)
@pytest.mark.parametrize("x", [-2.0, 0.0, 1.5])
def test_forward_difference_error_is_bounded_by_truncation_for_low_degree_polynomials(f, df, x, curvature) -> None:
    steps = (1e-1, 1e-2, 1e-3)
    errors = [abs(derivative(f, x, h) - df(x)) for h in steps]
    # The forward-difference error of a*x**2 + ... is exactly a*h; lines only see round-off.
    for err, h in zip(errors, steps):
        assert err <= curvature * h + 1e-9
    if curvature:
        assert errors[0] > errors[1] > errors[2]


def test_derivative_accepts_arrays_for_vectorized_functions() -> None:
    xs = np.linspace(-1.0, 1.0, 5)
    out = derivative(np.sin, xs, 1e-5)
    np.testing.assert_allclose(out, np.cos(xs), atol=1e-4)


def test_derivative_rejects_zero_step() -> None:
    with pytest.raises(ValueError, match="nonzero"):
        derivative(math.sin, 0.0, 0.0)


def test_second_derivative_of_quadratic_is_constant() -> None:
    f = lambda x: 3.0 * x * x + x  # noqa: E731
    for x in (-1.0, 0.0, 2.5):
        assert second_derivative(f, x) == pytest.approx(6.0, abs=1e-4)


@pytest.mark.parametrize("n", [1, 2, 7, 100, 1000])
@pytest.mark.parametrize("a, b", [(0.0, 1.0), (-3.5, 2.25), (10.0, 10.5)])
def test_integral_of_one_is_exactly_interval_width(n, a, b) -> None:
    assert integrate(lambda x: 1.0, a, b, n) == b - a


def test_integral_of_identity_over_unit_interval() -> None:
    for n in (1, 10, 1000):
        assert integrate(lambda x: x, 0.0, 1.0, n) == pytest.approx(0.5, abs=1e-12)


def test_trapezoid_error_shrinks_quadratically() -> None:
    exact = 1.0 / 3.0
    e10 = abs(integrate(lambda x: x * x, 0.0, 1.0, 10) - exact)
    e100 = abs(integrate(lambda x: x * x, 0.0, 1.0, 100) - exact)
    assert e10 == pytest.approx(1.0 / 600.0, rel=1e-6)
    assert e100 == pytest.approx(e10 / 100.0, rel=1e-3)


@pytest.mark.parametrize("a, b", [(0.0, 2.0), (-1.0, 3.0), (0.5, -4.0)])
def test_integral_is_antisymmetric_under_endpoint_swap(a, b) -> None:
    f = lambda x: math.exp(x / 3.0) * math.sin(x)  # noqa: E731
    assert integrate(f, a, b, 50) == -integrate(f, b, a, 50)


def test_integral_over_empty_interval_is_zero() -> None:
    assert integrate(math.sin, 1.0, 1.0, 10) == 0.0


def test_integral_rejects_nonpositive_interval_count() -> None:
    with pytest.raises(ValueError, match="at least one subinterval"):
        integrate(math.sin, 0.0, 1.0, 0)


def test_evaluate_on_grid_falls_back_to_pointwise_for_scalar_only_callables() -> None:
    xs = np.array([0.0, math.pi / 2.0])
    out = evaluate_on_grid(math.sin, xs)
    np.testing.assert_allclose(out, [0.0, 1.0], atol=1e-15)


def test_evaluate_on_grid_broadcasts_constant_callables() -> None:
    out = evaluate_on_grid(lambda x: 4.0, np.zeros(3))
    assert out.tolist() == [4.0, 4.0, 4.0]


def test_non_finite_values_do_not_raise() -> None:
    assert math.isinf(derivative(lambda x: 1.0 / x if x else math.inf, 0.0, 1e-3))
