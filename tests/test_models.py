"""Tests for the pydantic request, response and settings models."""

from __future__ import annotations

import gmpy2
import pytest
from pydantic import ValidationError

from context import Condition, ConditionSet, Context, RoundingMode
from models import ContextSettings, ContextState, DivModRequest, Operand, OperandKind


class TestContextSettings:

    def test_defaults_match_context(self):
        ctx = ContextSettings().to_context()
        assert ctx == Context()

    def test_round_trip(self):
        original = Context(
            precision=113,
            rounding=RoundingMode.UP,
            emin=-500,
            emax=500,
            subnormalize=True,
            traps=ConditionSet.of([Condition.INEXACT, Condition.DIVZERO]),
        )
        settings = ContextSettings.from_context(original)
        assert settings.traps == [Condition.INEXACT, Condition.DIVZERO]
        rebuilt = settings.to_context()
        assert rebuilt.precision == 113
        assert rebuilt.rounding is RoundingMode.UP
        assert rebuilt.traps.active() == original.traps.active()

    def test_precision_lower_bound(self):
        with pytest.raises(ValidationError):
            ContextSettings(precision=1)

    def test_unknown_rounding(self):
        with pytest.raises(ValidationError):
            ContextSettings(rounding="half_even")

    def test_duplicate_traps(self):
        with pytest.raises(ValidationError, match="repeat"):
            ContextSettings(traps=["inexact", "inexact"])

    def test_unknown_trap(self):
        with pytest.raises(ValidationError):
            ContextSettings(traps=["clamped"])

    def test_exponent_order(self):
        with pytest.raises(ValidationError, match="emin"):
            ContextSettings(emin=10, emax=-10)

    def test_exponent_beyond_backend(self):
        with pytest.raises(ValidationError):
            ContextSettings(emin=gmpy2.get_emin_min() - 1)


class TestOperand:

    def test_integer(self, ctx):
        value = Operand(kind="integer", value="-12345678901234567890").to_number(ctx)
        assert value == -12345678901234567890
        assert isinstance(value, gmpy2.mpz)

    def test_rational(self, ctx):
        assert Operand(kind="rational", value="7/2").to_number(ctx) == gmpy2.mpq(7, 2)

    def test_real_uses_context_precision(self):
        ctx = Context(precision=200)
        value = Operand(kind="real", value="0.1").to_number(ctx)
        assert value.precision == 200

    def test_real_special_values(self, ctx):
        assert gmpy2.is_infinite(Operand(kind="real", value="-inf").to_number(ctx))
        assert gmpy2.is_nan(Operand(kind="real", value="nan").to_number(ctx))

    def test_complex(self, ctx):
        assert Operand(kind="complex", value="1+2j").to_number(ctx) == 1 + 2j

    def test_whitespace_stripped(self):
        assert Operand(kind="integer", value="  42 ").value == "42"

    def test_blank_rejected(self):
        with pytest.raises(ValidationError):
            Operand(kind="integer", value="   ")

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            Operand(kind="integer", value="")

    def test_too_long_rejected(self):
        with pytest.raises(ValidationError):
            Operand(kind="integer", value="1" * 5000)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            Operand(kind="quaternion", value="1")

    def test_unparseable_integer(self, ctx):
        with pytest.raises(ValueError):
            Operand(kind="integer", value="abc").to_number(ctx)


class TestPayloads:

    def test_request_without_context(self):
        request = DivModRequest.model_validate({
            "x": {"kind": "integer", "value": "7"},
            "y": {"kind": "integer", "value": "2"},
        })
        assert request.context is None
        assert request.x.kind is OperandKind.INTEGER

    def test_request_with_context(self):
        request = DivModRequest.model_validate({
            "x": {"kind": "real", "value": "1"},
            "y": {"kind": "real", "value": "3"},
            "context": {"precision": 24, "traps": ["inexact"]},
        })
        assert request.context.to_context().traps.inexact

    def test_context_state(self, ctx):
        ctx.divmod(1.0, 3.0)
        state = ContextState.from_context(ctx)
        assert state.flags == [Condition.INEXACT]
        assert state.settings.precision == 53
