"""Tests for tower classification and promotion."""
from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

import gmpy2
import pytest

from context import Context
from tower import Layer, common_layer, is_integer, layer_of, to_integer, to_rational, to_real


class HasMpq:
    def __mpq__(self):
        return gmpy2.mpq(1, 3)


@pytest.mark.parametrize("value, layer", [
    (7, Layer.INTEGER),
    (True, Layer.INTEGER),
    (gmpy2.mpz(7), Layer.INTEGER),
    (gmpy2.xmpz(7), Layer.INTEGER),
    (Fraction(1, 2), Layer.RATIONAL),
    (gmpy2.mpq(1, 2), Layer.RATIONAL),
    (HasMpq(), Layer.RATIONAL),
    (2.5, Layer.REAL),
    (Decimal("2.5"), Layer.REAL),
    (gmpy2.mpfr("2.5"), Layer.REAL),
    (1j, Layer.COMPLEX),
    (gmpy2.mpc(1, 2), Layer.COMPLEX),
    ("7", None),
    (None, None),
])
def test_layer_of(value, layer):
    assert layer_of(value) is layer


@pytest.mark.parametrize("x, y, layer", [
    (7, gmpy2.mpz(2), Layer.INTEGER),
    (7, Fraction(1, 2), Layer.RATIONAL),
    (Fraction(1, 2), 2.0, Layer.REAL),
    (2.0, 1j, Layer.COMPLEX),
    (7, "2", None),
])
def test_common_layer(x, y, layer):
    assert common_layer(x, y) is layer


def test_bool_is_integer():
    assert is_integer(False)


def test_to_integer_passes_mpz_through():
    value = gmpy2.mpz(5)
    assert to_integer(value) is value
    assert isinstance(to_integer(5), gmpy2.mpz)


def test_to_rational_converts_fraction():
    assert to_rational(Fraction(3, 4)) == gmpy2.mpq(3, 4)


def test_to_real_float_is_exact():
    backend = Context(precision=2).backend()
    value = to_real(0.1, backend)
    assert value.precision == 53
    assert value == 0.1


def test_to_real_rounds_to_context_precision():
    backend = Context(precision=10).backend()
    value = to_real(Fraction(1, 3), backend)
    assert value.precision == 10


def test_to_real_passes_mpfr_through():
    value = gmpy2.mpfr("1.5", 200)
    assert to_real(value, Context().backend()) is value
