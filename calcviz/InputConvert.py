# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

import math
from typing import Any, Type, TypeVar

import sympy as sp

T = TypeVar("T", int, float)


def InputConvert(obj: Any, dest_type: Type[T] = float, truncate: bool = True) -> T:
    """
    Convert a configuration value `obj` to `dest_type`.

    Supported destination types:
    - float (strictly real)
    - int

    Rules:
    - If `obj` is a number: cast via dest_type(obj). Booleans are rejected.
    - If `obj` is a string:
        1) try float(s)
        2) else parse as a SymPy expression ("pi", "-2*pi", "3/4"), then evaluate.

    Truncation Rules (`truncate`):
    - When converting a value with an imaginary part (e.g. "sqrt(-1)"):
        - If `truncate=True`: Discard imaginary part.
        - If `truncate=False`: Raise ValueError.
    - When converting Float -> Int:
        - If `truncate=True`: Truncate decimal part (e.g., 3.9 -> 3).
        - If `truncate=False`: Require exact integer (e.g., 3.0 -> 3, 3.1 -> Error).

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If conversion fails or violates truncation rules.

    Examples
    --------
    >>> InputConvert("pi/2")
    1.5707963267948966
    >>> InputConvert("200", int)
    200
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    def _coerce(value: complex) -> T:
        if value.imag != 0 and not truncate:
            raise ValueError(
                f"Could not convert non-real {value!r} to {dest_type.__name__}: imaginary part is non-zero."
            )
        real = float(value.real)
        if dest_type is float:
            return real  # type: ignore[return-value]

        if not math.isfinite(real):
            raise ValueError(f"Could not convert {real!r} to int: value is not finite.")
        if not real.is_integer() and not truncate:
            raise ValueError(f"Could not convert {real!r} to int: value is not an exact integer.")
        return int(real)  # type: ignore[return-value]

    if isinstance(obj, bool):
        raise ValueError(f"Refusing to convert boolean {obj!r} to {dest_type.__name__}.")

    if isinstance(obj, (int, float)):
        return _coerce(complex(obj))

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")
        try:
            return _coerce(complex(float(s)))
        except ValueError:
            pass

        try:
            value = complex(sp.sympify(s).evalf())
        except Exception as e:
            raise ValueError(
                f"Could not convert {obj!r} to {dest_type.__name__} (neither directly nor via SymPy)."
            ) from e
        return _coerce(value)

    # NumPy scalars, SymPy numbers and other objects that know how to become complex.
    try:
        value = complex(obj)
    except Exception as e:
        raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e
    return _coerce(value)

# === END OF SECTION: InputConvert [id: InputConvert]===
