"""Arithmetic context: precision, rounding, sticky flags and traps.

A ``Context`` carries everything a real (``mpfr``) computation needs to
know about rounding, plus the IEEE-754 style bookkeeping of what went
wrong:

flags   sticky booleans, set by an operation and only cleared on request
traps   per-condition enable bits; a trapped condition raises instead of
        only setting its flag

A context may be read-only.  Read-only contexts are templates: nothing
ever mutates them, and ``Context.divmod`` works on a throwaway writable
copy instead.

The process-wide *current* context lives at module level (see
``get_context``/``set_context``/``local_context``).  Access is assumed to
be single-threaded.
"""
from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator

import gmpy2

from errors import (
    ArgumentCountError,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ReadOnlyContextError,
    Underflow,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration enums
# ---------------------------------------------------------------------------

class RoundingMode(str, Enum):
    NEAREST = "nearest"
    TOWARD_ZERO = "toward_zero"
    UP = "up"
    DOWN = "down"
    AWAY_FROM_ZERO = "away_from_zero"

    @property
    def backend_mode(self) -> int:
        """The matching gmpy2 rounding constant."""
        return _BACKEND_ROUNDING[self]


_BACKEND_ROUNDING = {
    RoundingMode.NEAREST: gmpy2.RoundToNearest,
    RoundingMode.TOWARD_ZERO: gmpy2.RoundToZero,
    RoundingMode.UP: gmpy2.RoundUp,
    RoundingMode.DOWN: gmpy2.RoundDown,
    RoundingMode.AWAY_FROM_ZERO: gmpy2.RoundAwayZero,
}


class Condition(str, Enum):
    """Exceptional conditions tracked by flags and traps."""

    UNDERFLOW = "underflow"
    OVERFLOW = "overflow"
    INEXACT = "inexact"
    INVALID = "invalid"
    DIVZERO = "divzero"


_TRAP_ERRORS = {
    Condition.UNDERFLOW: Underflow,
    Condition.OVERFLOW: Overflow,
    Condition.INEXACT: Inexact,
    Condition.INVALID: InvalidOperation,
    Condition.DIVZERO: DivisionByZero,
}

# Trapped backend flags are reported in this order.
_RESULT_CONDITIONS = (
    (Condition.UNDERFLOW, "underflow"),
    (Condition.OVERFLOW, "overflow"),
    (Condition.INEXACT, "inexact result"),
)

# MPFR defaults, also gmpy2's.
DEFAULT_PRECISION = 53
DEFAULT_EMAX = 2**30 - 1
DEFAULT_EMIN = -DEFAULT_EMAX


# ---------------------------------------------------------------------------
# Flag / trap sets
# ---------------------------------------------------------------------------

@dataclass
class ConditionSet:
    """One boolean per ``Condition``.  Used for both flags and traps."""

    underflow: bool = False
    overflow: bool = False
    inexact: bool = False
    invalid: bool = False
    divzero: bool = False
    locked: bool = field(default=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "locked", False):
            raise ReadOnlyContextError(
                f"cannot set {name!r} on a read-only context"
            )
        super().__setattr__(name, value)

    @classmethod
    def of(cls, conditions) -> ConditionSet:
        """Build a set with exactly the given conditions enabled."""
        result = cls()
        for condition in conditions:
            result.set(Condition(condition))
        return result

    def is_set(self, condition: Condition) -> bool:
        return getattr(self, condition.value)

    def set(self, condition: Condition) -> None:
        setattr(self, condition.value, True)

    def clear(self) -> None:
        for condition in Condition:
            setattr(self, condition.value, False)

    def active(self) -> list[Condition]:
        return [c for c in Condition if self.is_set(c)]

    def unlocked_copy(self) -> ConditionSet:
        return ConditionSet(
            **{c.value: self.is_set(c) for c in Condition}
        )


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

_SETTINGS = ("precision", "rounding", "emin", "emax", "subnormalize")


@dataclass
class Context:
    """Precision, rounding and exception state for real arithmetic."""

    precision: int = DEFAULT_PRECISION
    rounding: RoundingMode = RoundingMode.NEAREST
    emin: int = DEFAULT_EMIN
    emax: int = DEFAULT_EMAX
    subnormalize: bool = False
    flags: ConditionSet = field(default_factory=ConditionSet)
    traps: ConditionSet = field(default_factory=ConditionSet)
    readonly: bool = False

    def __post_init__(self) -> None:
        # readonly is already set here, so bypass our own __setattr__.
        object.__setattr__(self, "rounding", RoundingMode(self.rounding))
        if self.precision < 2:
            raise ValueError(f"precision must be >= 2, got {self.precision}")
        if self.emin >= self.emax:
            raise ValueError(
                f"emin ({self.emin}) must be < emax ({self.emax})"
            )
        if self.emin < gmpy2.get_emin_min() or self.emax > gmpy2.get_emax_max():
            raise ValueError(
                f"exponent range [{self.emin}, {self.emax}] exceeds "
                f"[{gmpy2.get_emin_min()}, {gmpy2.get_emax_max()}]"
            )
        if self.readonly:
            object.__setattr__(
                self, "flags", replace(self.flags.unlocked_copy(), locked=True)
            )
            object.__setattr__(
                self, "traps", replace(self.traps.unlocked_copy(), locked=True)
            )

    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "readonly", False):
            raise ReadOnlyContextError(
                f"cannot set {name!r} on a read-only context"
            )
        super().__setattr__(name, value)

    # -- copies ---------------------------------------------------------------

    def copy(self) -> Context:
        """Writable clone with its own flags and traps."""
        return Context(
            precision=self.precision,
            rounding=self.rounding,
            emin=self.emin,
            emax=self.emax,
            subnormalize=self.subnormalize,
            flags=self.flags.unlocked_copy(),
            traps=self.traps.unlocked_copy(),
        )

    def readonly_view(self) -> Context:
        """Read-only clone, suitable as a shared template."""
        return Context(
            **{name: getattr(self, name) for name in _SETTINGS},
            flags=self.flags.unlocked_copy(),
            traps=self.traps.unlocked_copy(),
            readonly=True,
        )

    # -- flags and traps ------------------------------------------------------

    def clear_flags(self) -> None:
        self.flags.clear()

    def signal(self, condition: Condition, message: str) -> None:
        """Record ``condition``; raise its error if the trap is enabled.

        The flag is always set, trapped or not.
        """
        self.flags.set(condition)
        if self.traps.is_set(condition):
            logger.debug("trapped %s: %s", condition.value, message)
            raise _TRAP_ERRORS[condition](message)

    def merge_backend_flags(self, backend: gmpy2.context, operation: str) -> None:
        """OR the flags raised by ``backend`` into the sticky set.

        Afterwards any trapped underflow, overflow or inexact condition
        raises, checked in that order.
        """
        for condition in Condition:
            if getattr(backend, condition.value):
                self.flags.set(condition)
        for condition, description in _RESULT_CONDITIONS:
            if getattr(backend, condition.value) and self.traps.is_set(condition):
                message = f"'mpfr' {description} in {operation}"
                logger.debug("trapped %s: %s", condition.value, message)
                raise _TRAP_ERRORS[condition](message)

    # -- backend --------------------------------------------------------------

    def backend(self) -> gmpy2.context:
        """A fresh gmpy2 context with these settings and no gmpy2 traps.

        Trapping is decided here, from our own trap bits, so the backend
        only ever records flags.
        """
        return gmpy2.context(
            precision=self.precision,
            round=self.rounding.backend_mode,
            emin=self.emin,
            emax=self.emax,
            subnormalize=self.subnormalize,
            trap_underflow=False,
            trap_overflow=False,
            trap_inexact=False,
            trap_invalid=False,
            trap_erange=False,
            trap_divzero=False,
        )

    # -- operations -----------------------------------------------------------

    def divmod(self, *args):
        """context.divmod(x, y) -> (quotient, remainder)

        A read-only context is never touched: the call runs on a writable
        copy that is dropped afterwards.  A writable context keeps the
        flags raised by the call.

        Branches: CTX-ARGCOUNT, CTX-READONLY-COPY, CTX-WRITABLE
        """
        from dispatch import number_divmod

        if len(args) != 2:                                        # CTX-ARGCOUNT
            raise ArgumentCountError("divmod() requires 2 arguments")
        if self.readonly:                                         # CTX-READONLY-COPY
            logger.debug("divmod on read-only context, using a copy")
            working = self.copy()
        else:                                                     # CTX-WRITABLE
            working = self
        return number_divmod(args[0], args[1], working)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

DEFAULT_CONTEXT = Context(readonly=True)


def ieee(bits: int) -> Context:
    """Context emulating an IEEE-754 binary interchange format.

    Supports 16, 32, 64 and any multiple of 32 from 128 upward.
    """
    if bits == 16:
        precision = 11
    elif bits == 32:
        precision = 24
    elif bits == 64:
        precision = 53
    elif bits >= 128 and bits % 32 == 0:
        precision = bits - round(4 * math.log2(bits)) + 13
    else:
        raise ValueError(f"unsupported IEEE bit width: {bits}")
    emax = 2 ** (bits - precision - 1)
    return Context(
        precision=precision,
        emin=4 - emax - precision,
        emax=emax,
        subnormalize=True,
    )


# ---------------------------------------------------------------------------
# Process-wide current context
# ---------------------------------------------------------------------------

_current: Context | None = None


def get_context() -> Context:
    """Return the current context, creating a default one on first use."""
    global _current
    if _current is None:
        _current = DEFAULT_CONTEXT.copy()
    return _current


def set_context(context: Context) -> None:
    """Install ``context`` as current; read-only contexts install a copy."""
    global _current
    _current = context.copy() if context.readonly else context


def reset_context() -> None:
    """Discard the current context; the next lookup starts from defaults."""
    global _current
    _current = None


@contextmanager
def local_context(context: Context | None = None, **overrides) -> Iterator[Context]:
    """Temporarily install a copy of ``context`` (or of the current one).

    Keyword overrides replace individual settings on the copy.
    """
    previous = get_context()
    base = context if context is not None else previous
    local = base.copy()
    if overrides:
        unknown = set(overrides) - set(_SETTINGS) - {"traps"}
        if unknown:
            raise TypeError(f"unknown context settings: {sorted(unknown)}")
        if "traps" in overrides:
            overrides["traps"] = ConditionSet.of(overrides["traps"])
        local = replace(local, **overrides)
    set_context(local)
    try:
        yield local
    finally:
        set_context(previous)


__all__ = [
    "Condition",
    "ConditionSet",
    "Context",
    "DEFAULT_CONTEXT",
    "RoundingMode",
    "get_context",
    "ieee",
    "local_context",
    "reset_context",
    "set_context",
]
