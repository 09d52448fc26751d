"""The numeric tower: Integer < Rational < Real < Complex.

Each layer is defined by convertibility, not by class hierarchy: an
``int`` is also a valid Rational, Real and Complex.  Besides the built-in
and gmpy2 types, any object exposing the gmpy2 conversion hooks
(``__mpz__``, ``__mpq__``, ``__mpfr__``, ``__mpc__``) joins the layer of
its hook.  As in gmpy2, an object with both ``__mpz__`` and ``__mpq__`` is
a Rational, and one with both ``__mpfr__`` and ``__mpc__`` is a Complex.
"""
from __future__ import annotations

from decimal import Decimal
from enum import IntEnum
from fractions import Fraction

import gmpy2


class Layer(IntEnum):
    INTEGER = 1
    RATIONAL = 2
    REAL = 3
    COMPLEX = 4


# Precision of a C double; floats convert to mpfr exactly at this width.
DOUBLE_PRECISION = 53


# ---------------------------------------------------------------------------
# Category predicates
# ---------------------------------------------------------------------------

def is_integer(x: object) -> bool:
    return isinstance(x, (int, gmpy2.mpz, gmpy2.xmpz)) or (
        hasattr(x, "__mpz__") and not hasattr(x, "__mpq__")
    )


def is_rational(x: object) -> bool:
    return (
        is_integer(x)
        or isinstance(x, (Fraction, gmpy2.mpq))
        or hasattr(x, "__mpq__")
    )


def is_real(x: object) -> bool:
    return (
        is_rational(x)
        or isinstance(x, (float, Decimal, gmpy2.mpfr))
        or (hasattr(x, "__mpfr__") and not hasattr(x, "__mpc__"))
    )


def is_complex(x: object) -> bool:
    return (
        is_real(x)
        or isinstance(x, (complex, gmpy2.mpc))
        or hasattr(x, "__mpc__")
    )


# Order matters: the first layer both operands satisfy wins, so the
# cheaper exact algorithms run whenever they can.
LAYER_TESTS = (
    (Layer.INTEGER, is_integer),
    (Layer.RATIONAL, is_rational),
    (Layer.REAL, is_real),
    (Layer.COMPLEX, is_complex),
)


def layer_of(x: object) -> Layer | None:
    """Lowest layer ``x`` converts into, or None for non-numbers."""
    for layer, test in LAYER_TESTS:
        if test(x):
            return layer
    return None


def common_layer(x: object, y: object) -> Layer | None:
    """Lowest layer both operands convert into, or None."""
    for layer, test in LAYER_TESTS:
        if test(x) and test(y):
            return layer
    return None


# ---------------------------------------------------------------------------
# Promotion
# ---------------------------------------------------------------------------

def to_integer(x) -> gmpy2.mpz:
    if type(x) is gmpy2.mpz:
        return x
    return gmpy2.mpz(x)


def to_rational(x) -> gmpy2.mpq:
    if type(x) is gmpy2.mpq:
        return x
    return gmpy2.mpq(x)


def to_real(x, backend: gmpy2.context) -> gmpy2.mpfr:
    """Promote ``x`` to mpfr.

    mpfr values pass through untouched and floats convert exactly.
    Everything else is rounded to the backend's precision and rounding
    mode.  Callers clear the backend flags after promotion, so a rounded
    conversion is never reported as an inexact result.
    """
    if isinstance(x, gmpy2.mpfr):
        return x
    if isinstance(x, float):
        return gmpy2.mpfr(x, DOUBLE_PRECISION)
    with backend:
        return gmpy2.mpfr(x, backend.precision)
