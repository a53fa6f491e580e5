"""
numpify: SymPy closed forms as vectorized NumPy functions
=========================================================

Purpose
-------
Every sample function is declared symbolically, but the chart evaluates it
on a few hundred grid points per render. This module prints the expression
with SymPy's NumPy printer, wraps the printed code in a generated ``def`` and
returns it as a :class:`NumpifiedFunction`, so one call evaluates the whole
grid.

Guarantees
----------
- Positional arguments follow ``vars`` exactly (``x`` first for the registry,
  then the shape parameters).
- Every argument goes through ``numpy.asarray(..., dtype=float)``; scalars
  therefore divide and overflow with NumPy semantics (``inf``/``nan``)
  instead of raising.
- The generated source is kept on :attr:`NumpifiedFunction.source`.

Public API
----------
- :func:`numpify`
- :func:`numpify_cached`
- :class:`NumpifiedFunction`

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> x, a = sp.symbols("x a")
>>> f = numpify(a * x, vars=(x, a))
>>> f(np.array([1.0, 2.0]), 3.0)
array([3., 6.])
>>> numpify(sp.Integer(5), vars=x)(np.array([1.0, 2.0, 3.0]))
array([5., 5., 5.])

Logging
-------
Silent by default. Compile times and cache misses go to DEBUG on
``calcviz.numpify``.
"""

from __future__ import annotations

import builtins
import keyword
import logging
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

import numpy as np
import sympy as sp
from sympy.printing.numpy import NumPyPrinter

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

VarsSpec = Optional[Union[sp.Symbol, Iterable[sp.Symbol]]]
Signature = Tuple[Tuple[sp.Symbol, str], ...]

_RESERVED = frozenset(keyword.kwlist) | frozenset(dir(builtins)) | {"numpy", "np"}


class NumpifiedFunction:
    """Compiled closed form plus a table of arguments bound with :meth:`freeze`.

    Attributes
    ----------
    symbolic : sympy.Basic
        Expression the code was generated from.
    call_signature : tuple of (Symbol, str)
        Argument symbols in call order with their Python parameter names.
    source : str
        Generated Python source.
    """

    __slots__ = ("_fn", "symbolic", "call_signature", "source", "_bound")

    def __init__(
        self,
        fn: Callable[..., Any],
        symbolic: sp.Basic,
        call_signature: Signature,
        source: str,
        *,
        bound: Mapping[sp.Symbol, Any] | None = None,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.call_signature = call_signature
        self.source = source
        self._bound: Dict[sp.Symbol, Any] = dict(bound or {})

    @property
    def vars(self) -> tuple[sp.Symbol, ...]:
        return tuple(sym for sym, _ in self.call_signature)

    @property
    def free_vars(self) -> tuple[sp.Symbol, ...]:
        return tuple(sym for sym in self.vars if sym not in self._bound)

    def _symbol_for(self, key: sp.Symbol | str) -> sp.Symbol:
        for sym, arg_name in self.call_signature:
            if isinstance(key, sp.Symbol):
                if sym == key:
                    return sym
            elif key in (arg_name, sym.name):
                return sym
        raise KeyError(f"{key!r} is not an argument of {self!r}")

    def freeze(self, bindings: Mapping[sp.Symbol | str, Any] | None = None, /, **kwargs: Any) -> "NumpifiedFunction":
        """Return a copy with some arguments fixed; the compiled code is shared."""
        bound = dict(self._bound)
        for key, value in [*(bindings or {}).items(), *kwargs.items()]:
            bound[self._symbol_for(key)] = value
        return NumpifiedFunction(self._fn, self.symbolic, self.call_signature, self.source, bound=bound)

    def __call__(self, *args: Any) -> Any:
        if not self._bound:
            return self._fn(*args)
        free = self.free_vars
        if len(args) != len(free):
            names = ", ".join(sym.name for sym in free)
            raise TypeError(f"expected {len(free)} positional argument(s) ({names}), got {len(args)}")
        supplied = dict(zip(free, args))
        return self._fn(*(self._bound[sym] if sym in self._bound else supplied[sym] for sym in self.vars))

    def __repr__(self) -> str:
        return f"NumpifiedFunction({self.symbolic!r}, vars=({', '.join(n for _, n in self.call_signature)}))"


def _as_expression(expr: Any) -> sp.Basic:
    try:
        out = sp.sympify(expr)
    except (sp.SympifyError, TypeError) as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr).__name__}") from e
    if not isinstance(out, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(out).__name__}")
    return out


def _vars_tuple(expr: sp.Basic, vars: VarsSpec) -> tuple[sp.Symbol, ...]:
    if vars is None:
        return tuple(sorted(expr.free_symbols, key=sp.default_sort_key))
    out = (vars,) if isinstance(vars, sp.Symbol) else tuple(vars)
    bad = [v for v in out if not isinstance(v, sp.Symbol)]
    if bad:
        raise TypeError(f"vars must contain only SymPy Symbols, got {bad!r}")
    return out


def _argument_names(vars_tuple: tuple[sp.Symbol, ...]) -> Signature:
    """Pick a valid, unique Python parameter name for every symbol."""
    taken = set(_RESERVED)
    out = []
    for sym in vars_tuple:
        base = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in sym.name) or "_"
        if base[0].isdigit():
            base = "_" + base
        name, n = base, 0
        while name in taken:
            n += 1
            name = f"{base}_{n}"
        taken.add(name)
        out.append((sym, name))
    return tuple(out)


def _compile(expr: sp.Basic, vars_tuple: tuple[sp.Symbol, ...]) -> NumpifiedFunction:
    unbound = sorted({s.name for s in expr.free_symbols} - {v.name for v in vars_tuple})
    if unbound:
        raise ValueError(
            f"Expression contains unbound symbols: {', '.join(unbound)}. "
            f"Provide them in vars=({', '.join(v.name for v in vars_tuple)})."
        )

    t0 = time.perf_counter()
    signature = _argument_names(vars_tuple)
    names = [name for _, name in signature]
    body = NumPyPrinter().doprint(expr.xreplace({sym: sp.Symbol(name) for sym, name in signature}))

    lines = [f"def _generated({', '.join(names)}):"]
    lines += [f"    {name} = numpy.asarray({name}, dtype=float)" for name in names]
    if names and not expr.free_symbols:
        # Constants still return one value per input point.
        lines.append(f"    return ({body}) + numpy.zeros(numpy.broadcast({', '.join(names)}).shape)")
    else:
        lines.append(f"    return {body}")
    source = "\n".join(lines)

    namespace: Dict[str, Any] = {"numpy": np}
    exec(source, namespace)
    fn = namespace["_generated"]
    fn.__doc__ = f"Generated from {expr!r} with arguments ({', '.join(names)})."

    logger.debug("numpify: compiled %r in %.2f ms", expr, 1000.0 * (time.perf_counter() - t0))
    return NumpifiedFunction(fn, expr, signature, source)


@lru_cache(maxsize=256)
def _compile_cached(expr: sp.Basic, vars_tuple: tuple[sp.Symbol, ...]) -> NumpifiedFunction:
    logger.debug("numpify_cached: cache MISS (vars=%s)", [v.name for v in vars_tuple])
    return _compile(expr, vars_tuple)


def numpify_cached(expr: Any, *, vars: VarsSpec = None) -> NumpifiedFunction:
    """Compile ``expr`` once per ``(expr, vars)``; see :func:`numpify`.

    The LRU cache is exposed as ``numpify_cached.cache_info()`` and
    ``numpify_cached.cache_clear()``.
    """
    e = _as_expression(expr)
    return _compile_cached(e, _vars_tuple(e, vars))


numpify_cached.cache_info = _compile_cached.cache_info  # type: ignore[attr-defined]
numpify_cached.cache_clear = _compile_cached.cache_clear  # type: ignore[attr-defined]


def numpify(expr: Any, *, vars: VarsSpec = None, cache: bool = True) -> NumpifiedFunction:
    """Compile a SymPy expression to a NumPy-evaluable function.

    Parameters
    ----------
    expr : sympy.Basic or str
        Expression to compile. Only compile trusted input: the generated
        code is executed with ``exec``.
    vars : Symbol or iterable of Symbol, optional
        Positional arguments in call order. Defaults to the free symbols in
        ``sympy.default_sort_key`` order.
    cache : bool, default=True
        Reuse :func:`numpify_cached`'s cache. ``False`` always recompiles.

    Raises
    ------
    TypeError
        If ``expr`` or ``vars`` is malformed.
    ValueError
        If ``expr`` has free symbols missing from ``vars``.
    """
    if cache:
        return numpify_cached(expr, vars=vars)
    e = _as_expression(expr)
    return _compile(e, _vars_tuple(e, vars))


__all__ = ["NumpifiedFunction", "numpify", "numpify_cached"]
