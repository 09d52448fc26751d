"""Property-based tests using Hypothesis.

These tests verify properties of floor divmod that must hold for *all*
inputs of a layer.  They complement the white-box tests by exploring the
input space broadly rather than targeting specific branches.
"""
from __future__ import annotations

import math
from fractions import Fraction

import gmpy2
from hypothesis import assume, given, settings
from hypothesis.strategies import complex_numbers, floats, fractions, integers

from context import DEFAULT_CONTEXT, Context
from dispatch import div_mod
from errors import UndefinedForComplex

# ---------------------------------------------------------------------------
# Shared configuration
# ---------------------------------------------------------------------------

CTX = Context()
wide_ints = integers(min_value=-(2**100), max_value=2**100)
word_ints = integers(min_value=-(2**62), max_value=2**62)
small_fractions = fractions(min_value=-1000, max_value=1000, max_denominator=100)
moderate_floats = floats(
    min_value=-1e9, max_value=1e9, allow_nan=False, allow_infinity=False
)
any_floats = floats(allow_nan=True, allow_infinity=True)


def _divmod(x, y):
    return CTX.copy().divmod(x, y)


# ===================================================================
# INTEGER
# ===================================================================

class TestIntegerProperties:

    @given(a=wide_ints, b=wide_ints)
    def test_matches_builtin(self, a, b):
        assume(b != 0)
        assert _divmod(a, b) == divmod(a, b)

    @given(a=wide_ints, b=word_ints)
    def test_mpz_by_word_matches_builtin(self, a, b):
        assume(b != 0)
        assert _divmod(gmpy2.mpz(a), b) == divmod(a, b)

    @given(a=wide_ints, b=wide_ints)
    def test_floor_identity(self, a, b):
        assume(b != 0)
        q, r = _divmod(a, b)
        assert q * b + r == a

    @given(a=wide_ints, b=wide_ints)
    def test_remainder_has_divisor_sign(self, a, b):
        assume(b != 0)
        _, r = _divmod(a, b)
        assert r == 0 or (r < 0) == (b < 0)
        assert abs(r) < abs(b)

    @given(a=wide_ints, b=wide_ints)
    def test_entry_points_agree(self, a, b):
        assume(b != 0)
        assert div_mod(a, b) == Context().divmod(a, b) == DEFAULT_CONTEXT.divmod(a, b)


# ===================================================================
# RATIONAL
# ===================================================================

class TestRationalProperties:

    @given(a=small_fractions, b=small_fractions)
    def test_floor_identity_exact(self, a, b):
        assume(b != 0)
        q, r = _divmod(a, b)
        assert gmpy2.mpq(q) * gmpy2.mpq(b) + r == gmpy2.mpq(a)

    @given(a=small_fractions, b=small_fractions)
    def test_quotient_is_floor(self, a, b):
        assume(b != 0)
        q, _ = _divmod(a, b)
        assert q == math.floor(a / b)

    @given(a=small_fractions, b=small_fractions)
    def test_remainder_matches_fraction_mod(self, a, b):
        assume(b != 0)
        _, r = _divmod(a, b)
        assert r == gmpy2.mpq(a % b)

    @given(a=integers(-1000, 1000), b=integers(-1000, 1000))
    def test_integral_fractions_match_integers(self, a, b):
        assume(b != 0)
        q, r = _divmod(Fraction(a), Fraction(b))
        assert (q, r) == divmod(a, b)


# ===================================================================
# REAL
# ===================================================================

class TestRealProperties:

    @given(a=moderate_floats, b=moderate_floats)
    @settings(max_examples=300)
    def test_floor_quotient_exact(self, a, b):
        """Exact floor whenever the quotient fits the precision."""
        assume(b != 0)
        assume(abs(a / b) < 2**40)
        q, r = _divmod(a, b)
        assert q == math.floor(Fraction(a) / Fraction(b))
        assert abs(r) <= abs(b)
        assert r == 0 or gmpy2.is_signed(r) == (b < 0)

    @given(a=integers(-(2**40), 2**40), b=integers(-(2**40), 2**40))
    def test_integer_valued_floats_exact(self, a, b):
        assume(b != 0)
        q, r = _divmod(float(a), float(b))
        assert (q, r) == divmod(a, b)

    @given(a=any_floats, b=any_floats)
    @settings(max_examples=300)
    def test_readonly_context_never_mutated(self, a, b):
        DEFAULT_CONTEXT.divmod(a, b)
        assert DEFAULT_CONTEXT.flags.active() == []

    @given(a=any_floats)
    def test_nan_in_nan_out(self, a):
        for x, y in ((math.nan, a), (a, math.nan)):
            q, r = _divmod(x, y)
            assert gmpy2.is_nan(q) and gmpy2.is_nan(r)

    @given(a=moderate_floats, precision=integers(min_value=2, max_value=300))
    def test_results_carry_context_precision(self, a, precision):
        assume(a != 0)
        ctx = Context(precision=precision)
        q, r = ctx.divmod(a, 3.0)
        assert q.precision == precision and r.precision == precision


# ===================================================================
# COMPLEX
# ===================================================================

class TestComplexProperties:

    @given(a=complex_numbers(), b=complex_numbers())
    @settings(max_examples=50)
    def test_always_undefined(self, a, b):
        try:
            _divmod(a, b)
        except UndefinedForComplex:
            return
        raise AssertionError(f"divmod({a!r}, {b!r}) did not fail")
