from __future__ import annotations

import math

import pytest

from calcviz.chart_config import DEFAULT_CONFIG, ChartConfig, Margins
from calcviz.errors import ConfigurationError
from calcviz.InputConvert import InputConvert


def test_inputconvert_parses_expression_strings() -> None:
    assert InputConvert("pi/2") == pytest.approx(math.pi / 2)
    assert InputConvert("-2*pi") == pytest.approx(-2 * math.pi)
    assert InputConvert(" 3.5 ") == 3.5
    assert InputConvert("200", int) == 200


def test_inputconvert_int_truncation_rules() -> None:
    assert InputConvert(3.9, int) == 3
    with pytest.raises(ValueError, match="exact integer"):
        InputConvert(3.1, int, truncate=False)


@pytest.mark.parametrize("value", [True, "", "x + 1", object()])
def test_inputconvert_rejects_unusable_values(value) -> None:
    with pytest.raises(ValueError):
        InputConvert(value)


def test_inputconvert_rejects_nonreal_without_truncation() -> None:
    with pytest.raises(ValueError, match="imaginary part is non-zero"):
        InputConvert("sqrt(-1)", truncate=False)
    assert InputConvert("sqrt(-1)") == 0.0


def test_inputconvert_rejects_unsupported_destination() -> None:
    with pytest.raises(NotImplementedError):
        InputConvert(1, complex)


def test_default_config_matches_original_widget() -> None:
    cfg = DEFAULT_CONFIG

    assert (cfg.width, cfg.height) == (800.0, 500.0)
    assert cfg.margins == Margins(top=40, right=40, bottom=60, left=60)
    assert (cfg.inner_width, cfg.inner_height) == (700.0, 400.0)
    assert cfg.steps == 200
    assert cfg.integral_subdivisions == 100
    assert cfg.derivative_step == 1e-4
    assert cfg.second_derivative_step == 1e-3
    assert (cfg.min_color, cfg.max_color) == ((0, 0, 255), (255, 0, 0))
    assert cfg.animation_step("phase") == 0.05


def test_from_mapping_parses_strings_and_nested_values() -> None:
    cfg = ChartConfig.from_mapping(
        {
            "width": "1000",
            "margins": {"top": 10, "right": 10, "bottom": 10, "left": 10},
            "steps": "50",
            "animation_steps": {"phase": "pi/100"},
        }
    )

    assert cfg.width == 1000.0
    assert cfg.inner_width == 980.0
    assert cfg.steps == 50
    assert cfg.animation_step("phase") == pytest.approx(math.pi / 100)
    assert cfg.animation_step("amplitude") == 0.05


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigurationError, match="colour"):
        ChartConfig.from_mapping({"colour": "red"})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"steps": 0},
        {"steps": 2.5},
        {"width": -1},
        {"derivative_step": 0},
        {"padding_fraction": -0.1},
        {"min_color": (0, 0, 300)},
        {"margins": Margins(left=500, right=400)},
        {"animation_steps": (("offset", 1.0),)},
        {"frame_interval_ms": "soon"},
    ],
)
def test_invalid_values_raise_configuration_error(kwargs) -> None:
    with pytest.raises(ConfigurationError):
        ChartConfig(**kwargs)


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        ChartConfig(steps=-5)


def test_expensive_integral_settings_warn() -> None:
    with pytest.warns(RuntimeWarning, match="evaluations per integral curve"):
        ChartConfig(steps=2000, integral_subdivisions=1000)


def test_unknown_animation_target_lookup() -> None:
    with pytest.raises(ConfigurationError):
        DEFAULT_CONFIG.animation_step("offset")


def test_with_updates_revalidates() -> None:
    assert DEFAULT_CONFIG.with_updates(steps=20).steps == 20
    with pytest.raises(ConfigurationError):
        DEFAULT_CONFIG.with_updates(steps=0)
