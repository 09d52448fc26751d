"""Per-layer floor divmod algorithms.

One function per tower layer.  Each takes ``(x, y, context)`` and returns
a ``(quotient, remainder)`` tuple, raises, or returns ``NotImplemented``
when the operands do not belong to its layer.

All of them follow floor semantics: ``quotient == floor(x / y)`` and the
remainder carries the sign of the divisor.  Decision branches are
annotated with their branch ids (see contract.py ``Branch``) so white-box
tests can trace coverage back to the contract.
"""
from __future__ import annotations

import sys

import gmpy2

from context import Condition, Context
from errors import DivisionByZero, UndefinedForComplex
from tower import is_integer, is_rational, is_real, to_integer, to_rational, to_real

# Range of a signed machine word.
WORD_MIN = -sys.maxsize - 1
WORD_MAX = sys.maxsize

ZERO_DIVISION_MESSAGE = "division or modulo by zero"


# ---------------------------------------------------------------------------
# Integer
# ---------------------------------------------------------------------------

def _mpz_divmod_int(x: gmpy2.mpz, y: int):
    """mpz dividend, plain int divisor.

    Branches: INT-WORD-POS, INT-WORD-ZERO, INT-WORD-NEG, INT-WIDE
    """
    if not WORD_MIN <= y <= WORD_MAX:                             # INT-WIDE
        return gmpy2.f_divmod(x, gmpy2.mpz(y))
    if y > 0:                                                     # INT-WORD-POS
        return gmpy2.f_divmod(x, y)
    if y == 0:                                                    # INT-WORD-ZERO
        raise DivisionByZero(ZERO_DIVISION_MESSAGE)
    # Ceiling-divide by |y| and negate: -ceil(x / |y|) == floor(x / y).
    quotient, remainder = gmpy2.c_divmod(x, -y)                   # INT-WORD-NEG
    return -quotient, remainder


def integer_divmod(x, y, context: Context):
    """Floor divmod of two integers; never rounds, never sets flags.

    Branches: INT-MPZ-MPZ, INT-INT-MPZ, INT-GENERIC, INT-ZERO
    """
    if isinstance(x, gmpy2.mpz):
        if isinstance(y, int):
            return _mpz_divmod_int(x, y)
        if isinstance(y, gmpy2.mpz):                              # INT-MPZ-MPZ
            if y == 0:                                            # INT-ZERO
                raise DivisionByZero(ZERO_DIVISION_MESSAGE)
            return gmpy2.f_divmod(x, y)

    if isinstance(y, gmpy2.mpz) and isinstance(x, int):           # INT-INT-MPZ
        if y == 0:                                                # INT-ZERO
            raise DivisionByZero(ZERO_DIVISION_MESSAGE)
        return gmpy2.f_divmod(gmpy2.mpz(x), y)

    if is_integer(x) and is_integer(y):                           # INT-GENERIC
        dividend, divisor = to_integer(x), to_integer(y)
        if divisor == 0:                                          # INT-ZERO
            raise DivisionByZero(ZERO_DIVISION_MESSAGE)
        return gmpy2.f_divmod(dividend, divisor)

    return NotImplemented


# ---------------------------------------------------------------------------
# Rational
# ---------------------------------------------------------------------------

def rational_divmod(x, y, context: Context):
    """Exact floor divmod of two rationals.

    The quotient is an mpz and the remainder an mpq, even when the
    remainder happens to be integral.

    Branches: RAT-ZERO, RAT-EXACT
    """
    if not (is_rational(x) and is_rational(y)):
        return NotImplemented

    dividend, divisor = to_rational(x), to_rational(y)
    if divisor == 0:                                              # RAT-ZERO
        raise DivisionByZero(ZERO_DIVISION_MESSAGE)

    exact = dividend / divisor                                    # RAT-EXACT
    quotient = gmpy2.f_div(exact.numerator, exact.denominator)
    remainder = dividend - gmpy2.mpq(quotient) * divisor
    return quotient, remainder


# ---------------------------------------------------------------------------
# Real
# ---------------------------------------------------------------------------

def _sign_of(value: gmpy2.mpfr) -> int:
    return -1 if gmpy2.is_signed(value) else 1


def _infinite_divisor(x: gmpy2.mpfr, y: gmpy2.mpfr, backend, precision: int):
    """Finite dividend, infinite divisor.

    Branches: REAL-INF-ZERO, REAL-INF-OPPOSITE, REAL-INF-SAME
    """
    if gmpy2.is_zero(x):                                          # REAL-INF-ZERO
        with backend:
            return gmpy2.zero(_sign_of(y)), gmpy2.zero(_sign_of(y))
    if gmpy2.is_signed(x) != gmpy2.is_signed(y):                  # REAL-INF-OPPOSITE
        with backend:
            return gmpy2.mpfr(-1, precision), gmpy2.inf(_sign_of(y))
    # Same sign: quotient 0, remainder x rounded to working precision.
    return gmpy2.mpfr(0, precision), backend.plus(x)              # REAL-INF-SAME


def _finite_divmod(x: gmpy2.mpfr, y: gmpy2.mpfr, backend, rounding: int):
    """General case.

    The division rounds down before the floor is taken.  ``rint_floor``
    keeps the quotient an mpfr, so infinities and NaN pass through.  The
    remainder is ``-(q*y - x)`` from a single fused multiply-subtract.

    Branch: REAL-FINITE
    """
    backend.round = gmpy2.RoundDown
    quotient = backend.rint_floor(backend.div(x, y))
    backend.round = rounding
    remainder = backend.minus(backend.fms(quotient, y, x))
    return quotient, remainder


def real_divmod(x, y, context: Context):
    """Floor divmod of two reals under ``context``.

    Special values follow this table, in order:

    1. y == 0             divzero flag (trap: DivisionByZero), then go on
    2. x or y NaN, x inf  invalid flag (trap: InvalidOperation); (nan, nan)
    3. y inf              invalid flag (trap: InvalidOperation);
                          x == 0        -> (±0, ±0) signed like y
                          signs differ  -> (-1, ±inf) signed like y
                          same sign     -> (0, x)
    4. otherwise          floor quotient, fused remainder

    Backend flags are then merged into ``context``; trapped underflow,
    overflow and inexact raise in that order and the result is dropped.

    Branches: REAL-ZERO-DIVISOR, REAL-NAN, REAL-INF-DIVISOR
    """
    if not (is_real(x) and is_real(y)):
        return NotImplemented

    backend = context.backend()
    dividend, divisor = to_real(x, backend), to_real(y, backend)

    if gmpy2.is_zero(divisor):                                    # REAL-ZERO-DIVISOR
        context.signal(Condition.DIVZERO, "'mpfr' division by zero in divmod")

    backend.clear_flags()
    if (
        gmpy2.is_nan(dividend)
        or gmpy2.is_nan(divisor)
        or gmpy2.is_infinite(dividend)
    ):                                                            # REAL-NAN
        context.signal(Condition.INVALID, "'mpfr' invalid operation in divmod")
        with backend:
            quotient, remainder = gmpy2.nan(), gmpy2.nan()
    elif gmpy2.is_infinite(divisor):                              # REAL-INF-DIVISOR
        context.signal(Condition.INVALID, "'mpfr' invalid operation in divmod")
        quotient, remainder = _infinite_divisor(
            dividend, divisor, backend, context.precision
        )
    else:
        quotient, remainder = _finite_divmod(
            dividend, divisor, backend, context.rounding.backend_mode
        )

    context.merge_backend_flags(backend, "divmod")
    return quotient, remainder


# ---------------------------------------------------------------------------
# Complex
# ---------------------------------------------------------------------------

def complex_divmod(x, y, context: Context):
    """Always fails.

    Branch: CPLX-UNDEFINED
    """
    raise UndefinedForComplex("can't take floor or mod of complex number.")
