from __future__ import annotations

import logging

import numpy as np
import pytest
import sympy as sp

from calcviz import numpify_module
from calcviz.numpify import NumpifiedFunction, numpify, numpify_cached


def test_numpify_uses_cache_by_default() -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()

    f1 = numpify(x + 1, vars=x)
    f2 = numpify(x + 1, vars=x)

    assert f1 is f2
    assert numpify_cached.cache_info().hits == 1


def test_numpify_cache_false_forces_recompile() -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()

    f1 = numpify(x + 1, vars=x, cache=False)
    f2 = numpify(x + 1, vars=x, cache=False)

    assert f1 is not f2
    assert numpify_cached.cache_info().currsize == 0


def test_cache_miss_is_logged_at_debug(caplog) -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()

    with caplog.at_level(logging.DEBUG, logger="calcviz.numpify"):
        numpify_cached(x**2, vars=x)

    assert "cache MISS" in caplog.text


def test_argument_order_follows_vars() -> None:
    x, a = sp.symbols("x a")
    f = numpify(a - x, vars=(x, a))

    assert f(1.0, 5.0) == 4.0
    assert f.vars == (x, a)


def test_constant_expression_broadcasts_to_argument_shape() -> None:
    x = sp.Symbol("x")
    g = numpify(sp.Integer(5), vars=x)

    np.testing.assert_array_equal(g(np.zeros(4)), np.full(4, 5.0))


def test_freeze_binds_parameters_and_keeps_compiled_code() -> None:
    x, a = sp.symbols("x a")
    f = numpify(a * sp.sin(x), vars=(x, a))
    g = f.freeze({a: 2.0})

    assert isinstance(g, NumpifiedFunction)
    assert g.free_vars == (x,)
    assert g.source == f.source
    assert g(np.pi / 2) == pytest.approx(2.0)
    assert f.freeze(a=3.0)(np.pi / 2) == pytest.approx(3.0)


def test_freeze_rejects_unknown_names() -> None:
    x = sp.Symbol("x")
    f = numpify(x, vars=x)
    with pytest.raises(KeyError):
        f.freeze(b=1.0)


def test_unbound_symbols_raise() -> None:
    x, y = sp.symbols("x y")
    with pytest.raises(ValueError, match="unbound symbols: y"):
        numpify(x + y, vars=x, cache=False)


def test_reserved_names_are_mangled_in_generated_source() -> None:
    lam = sp.Symbol("lambda")
    f = numpify(lam + 1, vars=lam, cache=False)

    assert f(1.0) == 2.0
    assert "def _generated(lambda)" not in f.source


def test_module_handle_is_exported() -> None:
    assert numpify_module.numpify is numpify
