from __future__ import annotations

import math

import numpy as np
import pytest

from calcviz.errors import ConfigurationError
from calcviz.function_registry import (
    DEFAULT_PARAMETERS,
    FunctionParameters,
    function_names,
    get_sample_function,
    iter_sample_functions,
)


def test_registry_lists_original_and_added_functions_in_order() -> None:
    assert function_names() == (
        "sine",
        "cosine",
        "polynomial",
        "exponential",
        "logistic",
        "quadratic",
        "reciprocal",
        "logarithm",
    )
    assert [fn.name for fn in iter_sample_functions()] == list(function_names())


@pytest.mark.parametrize(
    "name, reference",
    [
        ("sine", math.sin),
        ("cosine", math.cos),
        ("polynomial", lambda x: 0.1 * x**3 - 0.5 * x**2 + x),
        ("exponential", lambda x: math.exp(x / 3.0) * math.sin(x)),
        ("logistic", lambda x: 1.0 / (1.0 + math.exp(-x))),
        ("quadratic", lambda x: x * x),
    ],
)
def test_default_parameters_reproduce_plain_closed_forms(name, reference) -> None:
    fn = get_sample_function(name)
    for x in (-3.0, -0.5, 0.0, 1.25, 4.0):
        assert fn(x) == pytest.approx(reference(x), rel=1e-12, abs=1e-12)


def test_scalar_input_returns_python_float() -> None:
    assert isinstance(get_sample_function("sine")(0.5), float)


def test_bound_function_is_vectorized() -> None:
    f = get_sample_function("cosine").bind(FunctionParameters(amplitude=2.0, frequency=0.5, phase=1.0))
    xs = np.linspace(-1.0, 1.0, 7)
    np.testing.assert_allclose(f(xs), 2.0 * np.cos(0.5 * xs + 1.0))


def test_undefined_regions_give_non_finite_values_without_raising() -> None:
    assert math.isinf(get_sample_function("reciprocal")(0.0))
    assert math.isnan(get_sample_function("logarithm")(-1.0))


def test_unknown_name_lists_valid_names() -> None:
    with pytest.raises(KeyError, match="sine"):
        get_sample_function("tangent")


def test_equation_text_uses_substituted_parameters() -> None:
    sine = get_sample_function("sine")
    assert sine.equation_text() == "f(x) = sin(x)"
    assert sine.equation_text(FunctionParameters(amplitude=2)) == "f(x) = 2*sin(x)"
    assert "\\sin" in sine.equation_latex()


def test_parameters_accept_expression_strings() -> None:
    params = FunctionParameters(amplitude="2", frequency="1/2", phase="pi/2")
    assert params.as_tuple() == (2.0, 0.5, math.pi / 2)
    assert params.as_dict() == {"amplitude": 2.0, "frequency": 0.5, "phase": math.pi / 2}


@pytest.mark.parametrize("kwargs", [{"amplitude": math.inf}, {"phase": math.nan}, {"frequency": "x"}])
def test_parameters_reject_non_finite_or_symbolic_values(kwargs) -> None:
    with pytest.raises(ConfigurationError):
        FunctionParameters(**kwargs)


def test_with_value_and_from_mapping() -> None:
    assert DEFAULT_PARAMETERS.with_value("phase", 1.0).phase == 1.0
    with pytest.raises(ConfigurationError, match="Unknown function parameter"):
        DEFAULT_PARAMETERS.with_value("offset", 1.0)
    with pytest.raises(ConfigurationError, match="offset"):
        FunctionParameters.from_mapping({"offset": 1.0})
