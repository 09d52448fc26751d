"""Machine-readable contract for floor divmod.

For every tower layer the contract lists:
- postconditions: what a returned ``(quotient, remainder)`` must satisfy
- error conditions: which inputs must raise which exception
- algebraic properties: relationships between several calls

plus the decision branches the implementation annotates, so white-box
tests can prove each one is exercised.

Validation tools iterate over it to generate conformance checks and
search for counterexamples (see validation/counterexample_search.py).

Layers
------
Postcondition / ErrorCondition / AlgebraicProperty   building blocks
LayerContract     per-layer contract
Branch            every decision point white-box tests must cover
DivModContract    the full contract for a configured context
build_contract()  constructs a DivModContract for a context
"""
from __future__ import annotations

import builtins
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable

import gmpy2

from context import Condition, Context
from errors import DivisionByZero, InvalidOperation, UndefinedForComplex
from tower import Layer


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]      # check(x, y, quotient, remainder)


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]    # trigger(x, y)
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many free input values the check needs
    check: Callable[..., bool]      # check(op, *values)


@dataclass(frozen=True)
class LayerContract:
    layer: Layer
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]


@dataclass(frozen=True)
class Branch:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which function the branch lives in


@dataclass(frozen=True)
class DivModContract:
    """Complete contract for divmod under one context configuration."""

    context: Context
    layers: dict[Layer, LayerContract]
    branches: list[Branch]

    @property
    def all_properties(self) -> list[tuple[Layer, AlgebraicProperty]]:
        out: list[tuple[Layer, AlgebraicProperty]] = []
        for layer, contract in self.layers.items():
            for prop in contract.properties:
                out.append((layer, prop))
        return out

    @property
    def all_postconditions(self) -> list[tuple[Layer, Postcondition]]:
        out: list[tuple[Layer, Postcondition]] = []
        for layer, contract in self.layers.items():
            for post in contract.postconditions:
                out.append((layer, post))
        return out

    @property
    def branch_ids(self) -> set[str]:
        return {b.id for b in self.branches}


# ---------------------------------------------------------------------------
# Helpers used inside the predicates
# ---------------------------------------------------------------------------

def exact(value) -> gmpy2.mpq:
    """Exact rational value of a finite number."""
    if isinstance(value, float):
        return gmpy2.mpq(Fraction(value))
    return gmpy2.mpq(value)


def floor_quotient(x, y) -> gmpy2.mpz:
    """floor(x / y) computed exactly."""
    q = exact(x) / exact(y)
    return gmpy2.f_div(q.numerator, q.denominator)


def same_sign_or_zero(remainder, divisor) -> bool:
    if remainder == 0:
        return True
    return (remainder < 0) == (divisor < 0)


def is_finite_case(x, y) -> bool:
    """Finite dividend and finite nonzero divisor."""
    return (
        gmpy2.is_finite(x)
        and gmpy2.is_finite(y)
        and not gmpy2.is_zero(y)
    )


def quotient_fits(x, y, precision: int) -> bool:
    """Finite case whose floor quotient is representable at ``precision``."""
    return is_finite_case(x, y) and abs(floor_quotient(x, y)) < 2**precision


def is_invalid_case(x, y) -> bool:
    return (
        gmpy2.is_nan(x)
        or gmpy2.is_nan(y)
        or gmpy2.is_infinite(x)
        or gmpy2.is_infinite(y)
    )


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_contract(context: Context) -> DivModContract:
    """Construct the full divmod contract for ``context``.

    Real postconditions assume the context does not trap inexact,
    underflow or overflow results.
    """
    precision = context.precision
    trap_divzero = context.traps.is_set(Condition.DIVZERO)
    trap_invalid = context.traps.is_set(Condition.INVALID)

    # -------------------------------------------------------------- integer
    integer = LayerContract(
        layer=Layer.INTEGER,
        postconditions=[
            Postcondition(
                "floor_identity",
                "x == quotient*y + remainder exactly",
                lambda x, y, q, r: q * y + r == x,
            ),
            Postcondition(
                "remainder_sign",
                "remainder is zero or has the sign of y",
                lambda x, y, q, r: same_sign_or_zero(r, y),
            ),
            Postcondition(
                "remainder_bound",
                "|remainder| < |y|",
                lambda x, y, q, r: abs(r) < abs(y),
            ),
            Postcondition(
                "result_types",
                "quotient and remainder are mpz",
                lambda x, y, q, r: (
                    isinstance(q, gmpy2.mpz) and isinstance(r, gmpy2.mpz)
                ),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "zero_divisor",
                "DivisionByZero when y == 0",
                lambda x, y: y == 0,
                DivisionByZero,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "matches_builtin", "agrees with the built-in divmod", 2,
                lambda op, a, b: (
                    b == 0 or tuple(op(a, b)) == builtins.divmod(int(a), int(b))
                ),
            ),
            AlgebraicProperty(
                "negation_symmetry", "divmod(-a, -b) == (q, -r)", 2,
                lambda op, a, b: (
                    b == 0
                    or op(-a, -b) == (op(a, b)[0], -op(a, b)[1])
                ),
            ),
            AlgebraicProperty(
                "shift_by_divisor", "divmod(a + b, b) == (q + 1, r)", 2,
                lambda op, a, b: (
                    b == 0
                    or op(a + b, b) == (op(a, b)[0] + 1, op(a, b)[1])
                ),
            ),
            AlgebraicProperty(
                "zero_dividend", "divmod(0, b) == (0, 0) for b != 0", 1,
                lambda op, b: b == 0 or op(0, b) == (0, 0),
            ),
        ],
    )

    # ------------------------------------------------------------- rational
    rational = LayerContract(
        layer=Layer.RATIONAL,
        postconditions=[
            Postcondition(
                "floor_identity",
                "x == quotient*y + remainder exactly",
                lambda x, y, q, r: exact(q) * exact(y) + exact(r) == exact(x),
            ),
            Postcondition(
                "remainder_sign",
                "remainder is zero or has the sign of y",
                lambda x, y, q, r: same_sign_or_zero(r, y),
            ),
            Postcondition(
                "remainder_bound",
                "|remainder| < |y|",
                lambda x, y, q, r: abs(exact(r)) < abs(exact(y)),
            ),
            Postcondition(
                "result_types",
                "quotient is an mpz and remainder an mpq",
                lambda x, y, q, r: (
                    isinstance(q, gmpy2.mpz) and isinstance(r, gmpy2.mpq)
                ),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "zero_divisor",
                "DivisionByZero when y == 0",
                lambda x, y: y == 0,
                DivisionByZero,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "matches_fraction_floor",
                "quotient == floor(x / y) computed with fractions", 2,
                lambda op, a, b: (
                    b == 0
                    or op(a, b)[0] == math.floor(Fraction(a) / Fraction(b))
                ),
            ),
            AlgebraicProperty(
                "zero_dividend", "divmod(0, b) == (0, 0) for b != 0", 1,
                lambda op, b: b == 0 or op(Fraction(0), b) == (0, 0),
            ),
        ],
    )

    # ----------------------------------------------------------------- real
    real = LayerContract(
        layer=Layer.REAL,
        postconditions=[
            Postcondition(
                "quotient_integral",
                "quotient is integer-valued for finite x and finite y != 0",
                lambda x, y, q, r: (
                    not is_finite_case(x, y) or gmpy2.is_integer(q)
                ),
            ),
            Postcondition(
                "floor_quotient",
                "quotient == floor(x / y) whenever it fits the precision",
                lambda x, y, q, r: (
                    not quotient_fits(x, y, precision) or q == floor_quotient(x, y)
                ),
            ),
            Postcondition(
                "remainder_sign",
                "remainder is zero or has the sign of y when q is exact",
                lambda x, y, q, r: (
                    not quotient_fits(x, y, precision)
                    or gmpy2.is_zero(r)
                    or gmpy2.is_signed(r) == gmpy2.is_signed(y)
                ),
            ),
            Postcondition(
                "remainder_bound",
                "|remainder| <= |y| when q is exact (rounding may reach |y|)",
                lambda x, y, q, r: (
                    not quotient_fits(x, y, precision) or abs(r) <= abs(y)
                ),
            ),
            Postcondition(
                "nan_propagation",
                "NaN operand or infinite dividend gives (nan, nan)",
                lambda x, y, q, r: (
                    not (gmpy2.is_nan(x) or gmpy2.is_nan(y)
                         or gmpy2.is_infinite(x))
                    or (gmpy2.is_nan(q) and gmpy2.is_nan(r))
                ),
            ),
            Postcondition(
                "result_precision",
                "finite results carry the context precision",
                lambda x, y, q, r: (
                    not is_finite_case(x, y)
                    or (q.precision == precision and r.precision == precision)
                ),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "trapped_zero_divisor",
                "DivisionByZero when y == 0 and the divzero trap is set",
                lambda x, y: trap_divzero and gmpy2.is_zero(y),
                DivisionByZero,
            ),
            ErrorCondition(
                "trapped_invalid",
                "InvalidOperation on NaN/inf operands when the invalid "
                "trap is set",
                lambda x, y: (
                    trap_invalid
                    and is_invalid_case(x, y)
                    and not (trap_divzero and gmpy2.is_zero(y))
                ),
                InvalidOperation,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "matches_float_on_integers",
                "agrees with float divmod for small integer-valued operands",
                2,
                lambda op, a, b: (
                    precision < 53
                    or not is_finite_case(a, b)
                    or not (a == int(a) and b == int(b)
                            and abs(a) < 2**40 and abs(b) < 2**40)
                    or op(a, b) == builtins.divmod(float(a), float(b))
                ),
            ),
            AlgebraicProperty(
                "zero_dividend", "divmod(0, b) == (0, 0) for finite b != 0", 1,
                lambda op, b: (
                    not is_finite_case(0.0, b) or op(0.0, b) == (0, 0)
                ),
            ),
        ],
    )

    # -------------------------------------------------------------- complex
    complex_ = LayerContract(
        layer=Layer.COMPLEX,
        postconditions=[],
        error_conditions=[
            ErrorCondition(
                "always_undefined",
                "UndefinedForComplex for every complex operand pair",
                lambda x, y: True,
                UndefinedForComplex,
            ),
        ],
        properties=[],
    )

    # -------------------------------------------------------------- branches
    branches = [
        # Dispatch (dispatch.dispatch)
        Branch("DISPATCH-INTEGER", "Both operands are integers",
               "is_integer(x) and is_integer(y)", "dispatch"),
        Branch("DISPATCH-RATIONAL", "Lowest common layer is rational",
               "is_rational(x) and is_rational(y)", "dispatch"),
        Branch("DISPATCH-REAL", "Lowest common layer is real",
               "is_real(x) and is_real(y)", "dispatch"),
        Branch("DISPATCH-COMPLEX", "Lowest common layer is complex",
               "is_complex(x) and is_complex(y)", "dispatch"),
        Branch("DISPATCH-UNSUPPORTED", "No common layer, NotImplemented",
               "common_layer(x, y) is None", "dispatch"),
        # Integer (algorithms.integer_divmod)
        Branch("INT-WORD-POS", "mpz by positive machine-word int",
               "isinstance(x, mpz) and 0 < y <= WORD_MAX", "integer"),
        Branch("INT-WORD-ZERO", "mpz by int zero",
               "isinstance(x, mpz) and y == 0", "integer"),
        Branch("INT-WORD-NEG", "mpz by negative machine-word int",
               "isinstance(x, mpz) and WORD_MIN <= y < 0", "integer"),
        Branch("INT-WIDE", "mpz by int wider than a machine word",
               "isinstance(x, mpz) and not WORD_MIN <= y <= WORD_MAX",
               "integer"),
        Branch("INT-MPZ-MPZ", "mpz by mpz",
               "isinstance(x, mpz) and isinstance(y, mpz)", "integer"),
        Branch("INT-INT-MPZ", "int by mpz",
               "isinstance(x, int) and isinstance(y, mpz)", "integer"),
        Branch("INT-GENERIC", "Other integers, converted to mpz",
               "is_integer(x) and is_integer(y)", "integer"),
        Branch("INT-ZERO", "Zero mpz divisor",
               "to_integer(y) == 0", "integer"),
        # Rational (algorithms.rational_divmod)
        Branch("RAT-ZERO", "Zero rational divisor", "y == 0", "rational"),
        Branch("RAT-EXACT", "Exact quotient floored, exact remainder",
               "y != 0", "rational"),
        # Real (algorithms.real_divmod)
        Branch("REAL-ZERO-DIVISOR", "divzero flag raised (and maybe trapped)",
               "is_zero(y)", "real"),
        Branch("REAL-NAN", "(nan, nan) for NaN operand or infinite x",
               "is_nan(x) or is_nan(y) or is_inf(x)", "real"),
        Branch("REAL-INF-DIVISOR", "Finite x, infinite y",
               "is_inf(y)", "real"),
        Branch("REAL-INF-ZERO", "Zero x, infinite y: signed zeros",
               "is_zero(x) and is_inf(y)", "real"),
        Branch("REAL-INF-OPPOSITE", "Signs differ: (-1, inf signed like y)",
               "signbit(x) != signbit(y) and is_inf(y)", "real"),
        Branch("REAL-INF-SAME", "Same sign: (0, x)",
               "signbit(x) == signbit(y) and is_inf(y)", "real"),
        Branch("REAL-FINITE", "Floor quotient and fused remainder",
               "finite x, finite y", "real"),
        # Trap checks (context.Context.merge_backend_flags)
        Branch("REAL-TRAP-UNDERFLOW", "Underflow raised and trapped",
               "backend.underflow and traps.underflow", "real"),
        Branch("REAL-TRAP-OVERFLOW", "Overflow raised and trapped",
               "backend.overflow and traps.overflow", "real"),
        Branch("REAL-TRAP-INEXACT", "Inexact raised and trapped",
               "backend.inexact and traps.inexact", "real"),
        # Complex (algorithms.complex_divmod)
        Branch("CPLX-UNDEFINED", "Complex divmod always fails",
               "True", "complex"),
        # Entry points (context.Context.divmod, dispatch.div_mod)
        Branch("CTX-ARGCOUNT", "Wrong number of operands",
               "len(args) != 2", "context"),
        Branch("CTX-READONLY-COPY", "Read-only context, work on a copy",
               "context.readonly", "context"),
        Branch("CTX-WRITABLE", "Writable context used in place",
               "not context.readonly", "context"),
        Branch("CTX-CURRENT", "No context given, use the current one",
               "context is None", "context"),
    ]

    return DivModContract(
        context=context,
        layers={
            Layer.INTEGER: integer,
            Layer.RATIONAL: rational,
            Layer.REAL: real,
            Layer.COMPLEX: complex_,
        },
        branches=branches,
    )
