"""Element value model and host coercions used by the array engine."""

from __future__ import annotations

import locale
import math
import numbers
import operator
from enum import Enum
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .errors import ArgumentError

_UINT32_MODULUS: Final[int] = 2**32


class Missing(Enum):
    """Markers for slots that hold no element value."""

    UNDEFINED = "undefined"
    HOLE = "hole"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return self.value


UNDEFINED: Final = Missing.UNDEFINED
HOLE: Final = Missing.HOLE


def is_missing(value: object) -> bool:
    return value is UNDEFINED or value is HOLE or value is None


def is_typed_array(value: object) -> bool:
    if isinstance(value, jax.Array):
        return True
    return hasattr(value, "shape") and hasattr(value, "dtype") and hasattr(value, "ndim")


def as_jax_array(value: object):
    if isinstance(value, jnp.ndarray):
        return value
    return jnp.asarray(value)


def scalar_of(value: object) -> object:
    """Unwrap 0-d JAX/numpy arrays into Python scalars."""
    if is_typed_array(value) and value.ndim == 0:
        return value.item()
    return value


def invoke(fn: Callable, *args):
    return fn(*args)


def _to_number(value: object) -> float | int:
    value = scalar_of(value)
    if is_missing(value):
        return math.nan if value is not None else 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text, 0)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    try:
        return operator.index(value)
    except TypeError:
        pass
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ArgumentError(f"cannot convert {type(value).__name__} to an index") from exc


def to_uint32(value: object) -> int:
    number = _to_number(value)
    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return 0
        number = math.trunc(number)
    return number % _UINT32_MODULUS


def to_boolean(value: object) -> bool:
    value = scalar_of(value)
    if is_missing(value):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (numbers.Number, str)):
        return bool(value)
    return True


def _format_number(value: numbers.Real, *, use_locale: bool) -> str:
    if isinstance(value, numbers.Integral):
        if use_locale:
            return locale.format_string("%d", int(value), grouping=True)
        return str(int(value))
    real = float(value)
    if math.isnan(real):
        return "NaN"
    if math.isinf(real):
        return "Infinity" if real > 0 else "-Infinity"
    if real.is_integer() and abs(real) < 1e21:
        return _format_number(int(real), use_locale=use_locale)
    if use_locale:
        return locale.format_string("%g", real, grouping=True)
    return repr(real)


def stringify(value: object, use_locale: bool = False) -> str:
    value = scalar_of(value)
    if is_missing(value):
        return ""
    if use_locale:
        to_locale_string = getattr(value, "to_locale_string", None)
        if callable(to_locale_string):
            return str(to_locale_string())
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Real):
        return _format_number(value, use_locale=use_locale)
    if isinstance(value, str):
        return value
    to_string = getattr(value, "to_string", None)
    if callable(to_string):
        return str(to_string())
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item, use_locale) for item in value)
    if is_typed_array(value):
        return ",".join(stringify(item, use_locale) for item in value.tolist())
    return str(value)
