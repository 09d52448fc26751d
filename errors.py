"""Exception taxonomy for multiple-precision divmod.

Arithmetic conditions derive from ``DivModError`` (itself an
``ArithmeticError``) and, where Python already has a matching built-in,
from that built-in too, so ``except ZeroDivisionError`` keeps working for
callers that never heard of this module.

Type-level failures (wrong operands, wrong call shape) derive from
``TypeError``.  A failed allocation is Python's own ``MemoryError`` and is
never wrapped.
"""
from __future__ import annotations


# ---------------------------------------------------------------------------
# Arithmetic conditions (trap-gated for real operands)
# ---------------------------------------------------------------------------

class DivModError(ArithmeticError):
    """Base class for every arithmetic condition raised by divmod."""


class DivisionByZero(DivModError, ZeroDivisionError):
    """Divisor is exactly zero."""


class InvalidOperation(DivModError):
    """NaN operand, infinite dividend, or infinite divisor."""


class Underflow(DivModError):
    pass


class Overflow(DivModError, OverflowError):
    pass


class Inexact(DivModError):
    """Result had to be rounded."""


# ---------------------------------------------------------------------------
# Type-level failures (never trap-gated)
# ---------------------------------------------------------------------------

class UnsupportedOperandError(TypeError):
    """Operands share no layer of the numeric tower."""


class UndefinedForComplex(TypeError):
    """Floor and modulo have no meaning for complex values."""


class ArgumentCountError(TypeError):
    pass


class ReadOnlyContextError(AttributeError):
    """Raised on any attempt to mutate a read-only context."""
