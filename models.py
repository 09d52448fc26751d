"""Pydantic models for configuring contexts and exchanging divmod calls.

Operands travel as strings tagged with their tower layer, so values wider
than a JSON number (big integers, exact fractions, high-precision reals)
survive the trip unchanged.
"""

from __future__ import annotations

from enum import Enum

import gmpy2
from pydantic import BaseModel, Field, field_validator, model_validator

from context import (
    DEFAULT_EMAX,
    DEFAULT_EMIN,
    DEFAULT_PRECISION,
    Condition,
    ConditionSet,
    Context,
    RoundingMode,
)


# ---------------------------------------------------------------------------
# ContextSettings: validated context configuration
# ---------------------------------------------------------------------------

class ContextSettings(BaseModel):
    """Everything needed to build a ``Context``, minus its flags."""

    precision: int = Field(default=DEFAULT_PRECISION, ge=2)
    rounding: RoundingMode = RoundingMode.NEAREST
    emin: int = DEFAULT_EMIN
    emax: int = DEFAULT_EMAX
    subnormalize: bool = False
    traps: list[Condition] = Field(default_factory=list)

    @field_validator("traps")
    @classmethod
    def unique_traps(cls, traps: list[Condition]) -> list[Condition]:
        if len(set(traps)) != len(traps):
            raise ValueError("traps must not repeat a condition")
        return traps

    @model_validator(mode="after")
    def exponent_range(self) -> ContextSettings:
        if self.emin >= self.emax:
            raise ValueError(f"emin ({self.emin}) must be < emax ({self.emax})")
        if self.emin < gmpy2.get_emin_min() or self.emax > gmpy2.get_emax_max():
            raise ValueError("exponent range exceeds what the backend supports")
        return self

    def to_context(self) -> Context:
        return Context(
            precision=self.precision,
            rounding=self.rounding,
            emin=self.emin,
            emax=self.emax,
            subnormalize=self.subnormalize,
            traps=ConditionSet.of(self.traps),
        )

    @classmethod
    def from_context(cls, context: Context) -> ContextSettings:
        return cls(
            precision=context.precision,
            rounding=context.rounding,
            emin=context.emin,
            emax=context.emax,
            subnormalize=context.subnormalize,
            traps=context.traps.active(),
        )


# ---------------------------------------------------------------------------
# Operand: a tower value in string form
# ---------------------------------------------------------------------------

class OperandKind(str, Enum):
    INTEGER = "integer"
    RATIONAL = "rational"
    REAL = "real"
    COMPLEX = "complex"


class Operand(BaseModel):
    """A number tagged with the tower layer it should be parsed into.

    Real values are parsed at the precision of the context they are used
    with, so parsing waits for ``to_number``.
    """

    kind: OperandKind
    value: str = Field(
        ...,
        min_length=1,
        max_length=4096,
        description="Decimal text, e.g. '-7', '7/2', '2.5', 'inf', '1+2j'",
    )

    @field_validator("value")
    @classmethod
    def value_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Operand value must not be blank")
        return v.strip()

    def to_number(self, context: Context):
        """Parse into the gmpy2 type of this operand's layer.

        Raises ValueError for text the layer cannot parse.
        """
        if self.kind == OperandKind.INTEGER:
            return gmpy2.mpz(self.value)
        if self.kind == OperandKind.RATIONAL:
            return gmpy2.mpq(self.value)
        if self.kind == OperandKind.REAL:
            with context.backend():
                return gmpy2.mpfr(self.value, context.precision)
        return gmpy2.mpc(self.value)


# ---------------------------------------------------------------------------
# Request / response payloads
# ---------------------------------------------------------------------------

class DivModRequest(BaseModel):
    """Payload for one divmod call.

    Without ``context`` the service context is used and keeps the flags
    the call raises.
    """

    x: Operand
    y: Operand
    context: ContextSettings | None = None


class DivModResponse(BaseModel):
    quotient: str
    remainder: str
    layer: OperandKind
    flags: list[Condition] = Field(default_factory=list)


class ContextState(BaseModel):
    """Settings and sticky flags of the service context."""

    settings: ContextSettings
    flags: list[Condition] = Field(default_factory=list)

    @classmethod
    def from_context(cls, context: Context) -> ContextState:
        return cls(
            settings=ContextSettings.from_context(context),
            flags=context.flags.active(),
        )
