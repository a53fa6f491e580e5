"""Registry of the closed-form sample functions shown by the chart.

Purpose
-------
Every chart starts from one named real function. This module owns the fixed
set of those functions, the ``{amplitude, frequency, phase}`` record that
parametrizes them, and the compilation of each closed form into a vectorized
NumPy callable.

Concepts and structure
----------------------
A sample function is declared by decorating a one-argument SymPy builder with
:func:`sample_function`. The builder describes the *shape* ``g(u)``; the
registry wraps it as

.. math:: f(x) = A \\, g(k x + \\varphi)

so the parameter defaults ``A = 1, k = 1, φ = 0`` reproduce the plain shape.
The wrapped expression is compiled once (through :func:`numpify_cached`) with
the call signature ``(x, A, k, φ)``; binding a parameter record only freezes
the trailing arguments.

Important gotchas
-----------------
- The symbolic form is used for compilation and for equation labels only.
  Derivatives and integrals shown by the chart are always numerical.
- ``reciprocal`` and ``logarithm`` have poles or undefined regions inside the
  default domain. They evaluate to non-finite values there, by construction.

Examples
--------
>>> from calcviz.function_registry import get_sample_function, FunctionParameters
>>> sine = get_sample_function("sine")
>>> f = sine.bind(FunctionParameters(amplitude=2.0))
>>> float(f(0.0))
0.0
>>> sine.equation_text(FunctionParameters(amplitude=2.0))
'f(x) = 2*sin(x)'
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

import numpy as np
import sympy as sp

from .errors import ConfigurationError
from .InputConvert import InputConvert
from .numpify import NumpifiedFunction, numpify_cached

X = sp.Symbol("x", real=True)
AMPLITUDE = sp.Symbol("A", real=True)
FREQUENCY = sp.Symbol("k", real=True)
PHASE = sp.Symbol("varphi", real=True)

PARAMETER_NAMES = ("amplitude", "frequency", "phase")
_PARAMETER_SYMBOLS = {"amplitude": AMPLITUDE, "frequency": FREQUENCY, "phase": PHASE}


@dataclass(frozen=True)
class FunctionParameters:
    """Shape parameters substituted into a sample function's closed form.

    Parameters
    ----------
    amplitude : float
        Vertical scale ``A``.
    frequency : float
        Horizontal compression ``k`` applied to ``x``.
    phase : float
        Horizontal shift ``φ`` added after the compression.
    """

    amplitude: float = 1.0
    frequency: float = 1.0
    phase: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            raw = getattr(self, f.name)
            try:
                value = InputConvert(raw, float)
            except ValueError as exc:
                raise ConfigurationError(f"{f.name} must be a real number, got {raw!r}") from exc
            if not math.isfinite(value):
                raise ConfigurationError(f"{f.name} must be finite, got {value!r}")
            object.__setattr__(self, f.name, value)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "FunctionParameters":
        unknown = set(values) - set(PARAMETER_NAMES)
        if unknown:
            raise ConfigurationError(
                f"Unknown function parameter(s): {', '.join(sorted(unknown))}. "
                f"Expected a subset of {PARAMETER_NAMES}."
            )
        return cls(**dict(values))

    def with_value(self, name: str, value: Any) -> "FunctionParameters":
        """Return a copy with one parameter replaced."""
        if name not in PARAMETER_NAMES:
            raise ConfigurationError(f"Unknown function parameter {name!r}; expected one of {PARAMETER_NAMES}.")
        return replace(self, **{name: value})

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.amplitude, self.frequency, self.phase)

    def as_dict(self) -> Dict[str, float]:
        return dict(zip(PARAMETER_NAMES, self.as_tuple()))


DEFAULT_PARAMETERS = FunctionParameters()


def _display_number(value: float) -> sp.Expr:
    """Return a compact SymPy number for equation labels."""
    rounded = round(float(value), 3)
    if rounded.is_integer():
        return sp.Integer(int(rounded))
    return sp.Float(rounded)


class SampleFunction:
    """One named closed-form function ``f(x) = A g(k x + φ)``.

    Parameters
    ----------
    name : str
        Registry key, e.g. ``"sine"``.
    title : str
        Human-readable name used in chart titles.
    shape : callable
        Builder mapping a SymPy argument ``u`` to the shape expression ``g(u)``.
    """

    def __init__(self, name: str, title: str, shape: Callable[[sp.Symbol], sp.Expr]) -> None:
        self.name = name
        self.title = title
        self.shape = shape
        u = FREQUENCY * X + PHASE
        self.expr: sp.Expr = AMPLITUDE * sp.sympify(shape(u))
        self._numeric: Optional[NumpifiedFunction] = None

    @property
    def numeric(self) -> NumpifiedFunction:
        """Compiled callable with signature ``(x, A, k, φ)``, built lazily."""
        if self._numeric is None:
            self._numeric = numpify_cached(self.expr, vars=(X, AMPLITUDE, FREQUENCY, PHASE))
        return self._numeric

    def bind(self, parameters: FunctionParameters = DEFAULT_PARAMETERS) -> Callable[[Any], Any]:
        """Return the one-argument callable ``x -> f(x)`` for ``parameters``.

        The callable accepts scalars and NumPy arrays. Scalars yield Python
        floats so single-point evaluations read naturally.
        """
        frozen = self.numeric.freeze(
            {AMPLITUDE: parameters.amplitude, FREQUENCY: parameters.frequency, PHASE: parameters.phase}
        )

        def _f(x: Any) -> Any:
            with np.errstate(all="ignore"):
                out = frozen(x)
            if np.ndim(out) == 0:
                return float(out)
            return out

        _f.__name__ = self.name
        return _f

    def __call__(self, x: Any, parameters: FunctionParameters = DEFAULT_PARAMETERS) -> Any:
        return self.bind(parameters)(x)

    def expression(self, parameters: FunctionParameters = DEFAULT_PARAMETERS) -> sp.Expr:
        """Return the closed form with ``parameters`` substituted."""
        subs = {_PARAMETER_SYMBOLS[k]: _display_number(v) for k, v in parameters.as_dict().items()}
        return self.expr.xreplace(subs)

    def equation_text(self, parameters: FunctionParameters = DEFAULT_PARAMETERS) -> str:
        """Plain-text equation label, e.g. ``'f(x) = 2*sin(x)'``."""
        return f"f(x) = {sp.sstr(self.expression(parameters), full_prec=False)}"

    def equation_latex(self, parameters: FunctionParameters = DEFAULT_PARAMETERS) -> str:
        """LaTeX equation label for math-aware widgets."""
        return f"f(x) = {sp.latex(self.expression(parameters), full_prec=False)}"

    def __repr__(self) -> str:
        return f"SampleFunction({self.name!r}, {self.expr!r})"


_REGISTRY: Dict[str, SampleFunction] = {}


def sample_function(name: str, title: Optional[str] = None) -> Callable[[Callable[[sp.Symbol], sp.Expr]], SampleFunction]:
    """Decorator registering a shape builder as a named :class:`SampleFunction`."""

    def _register(shape: Callable[[sp.Symbol], sp.Expr]) -> SampleFunction:
        if name in _REGISTRY:
            raise ValueError(f"Sample function {name!r} is already registered")
        fn = SampleFunction(name, title or name.capitalize(), shape)
        _REGISTRY[name] = fn
        return fn

    return _register


@sample_function("sine")
def _sine(u):
    return sp.sin(u)


@sample_function("cosine")
def _cosine(u):
    return sp.cos(u)


@sample_function("polynomial")
def _polynomial(u):
    return sp.Rational(1, 10) * u**3 - sp.Rational(1, 2) * u**2 + u


@sample_function("exponential")
def _exponential(u):
    return sp.exp(u / 3) * sp.sin(u)


@sample_function("logistic")
def _logistic(u):
    return 1 / (1 + sp.exp(-u))


@sample_function("quadratic")
def _quadratic(u):
    return u**2


@sample_function("reciprocal")
def _reciprocal(u):
    return 1 / u


@sample_function("logarithm")
def _logarithm(u):
    return sp.log(u)


def function_names() -> tuple[str, ...]:
    """Return registered names in registration order."""
    return tuple(_REGISTRY)


def iter_sample_functions() -> Iterator[SampleFunction]:
    return iter(tuple(_REGISTRY.values()))


def get_sample_function(name: str) -> SampleFunction:
    """Look up a registered sample function by name.

    Raises
    ------
    KeyError
        If ``name`` is not registered. The message lists the valid names.
    """
    try:
        return _REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown sample function {name!r}; expected one of {function_names()}") from None


__all__ = [
    "AMPLITUDE",
    "DEFAULT_PARAMETERS",
    "FREQUENCY",
    "FunctionParameters",
    "PARAMETER_NAMES",
    "PHASE",
    "SampleFunction",
    "X",
    "function_names",
    "get_sample_function",
    "iter_sample_functions",
    "sample_function",
]
