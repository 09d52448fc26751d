"""Counterexample search: discovers gaps in implementation or tests.

This module runs independently of the test suite.  It walks a grid of
operands for every tower layer and searches for:

1. Postcondition violations: results that break the contract.
2. Error condition violations: inputs that should raise but don't (or
   raise the wrong exception).
3. Property violations: relationships between calls that fail for some
   input combination.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import itertools
import sys
from dataclasses import dataclass, field
from fractions import Fraction

sys.path.insert(0, ".")

from context import Condition, ConditionSet, Context
from contract import DivModContract, build_contract
from tower import Layer

# ---------------------------------------------------------------------------
# Operand grids
# ---------------------------------------------------------------------------

INTEGERS = list(range(-12, 13)) + [2**64 + 1, -(2**64) - 3]
RATIONALS = [
    Fraction(n, d) for n in range(-7, 8) for d in (1, 2, 3, 5)
]
REALS = (
    [float(v) for v in range(-9, 10)]
    + [0.1, -0.1, 2.5, -2.5, 1e300, -1e-300, 0.0, -0.0]
    + [float("inf"), float("-inf"), float("nan")]
)
COMPLEXES = [1j, 1 + 2j, -3.5 + 0j]

GRIDS = {
    Layer.INTEGER: INTEGERS,
    Layer.RATIONAL: RATIONALS,
    Layer.REAL: REALS,
    Layer.COMPLEX: COMPLEXES,
}


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    layer: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.layer}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found, all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def _pairs(layer: Layer):
    return itertools.product(GRIDS[layer], repeat=2)


def search_postcondition_violations(
    context: Context,
    contract: DivModContract,
) -> tuple[list[Counterexample], int]:
    """Verify postconditions for every operand pair of every layer."""
    cxs: list[Counterexample] = []
    checks = 0

    for layer, layer_contract in contract.layers.items():
        for x, y in _pairs(layer):
            should_error = any(
                ec.trigger(x, y) for ec in layer_contract.error_conditions
            )
            if should_error:
                checks += 1
                continue

            try:
                quotient, remainder = context.copy().divmod(x, y)
            except Exception as e:
                cxs.append(Counterexample(
                    category="unexpected_error",
                    layer=layer.name,
                    inputs=(x, y),
                    expected="no error",
                    actual=f"{type(e).__name__}: {e}",
                    description="divmod raised an unexpected exception",
                ))
                checks += 1
                continue

            for post in layer_contract.postconditions:
                if not post.check(x, y, quotient, remainder):
                    cxs.append(Counterexample(
                        category="postcondition_violation",
                        layer=layer.name,
                        inputs=(x, y),
                        expected=post.description,
                        actual=f"result=({quotient}, {remainder})",
                        description=f"Postcondition '{post.name}' violated",
                    ))
            checks += 1

    return cxs, checks


def search_error_condition_violations(
    context: Context,
    contract: DivModContract,
) -> tuple[list[Counterexample], int]:
    """Verify every error condition triggers the right exception."""
    cxs: list[Counterexample] = []
    checks = 0

    for layer, layer_contract in contract.layers.items():
        for x, y in _pairs(layer):
            for ec in layer_contract.error_conditions:
                if not ec.trigger(x, y):
                    continue
                checks += 1
                try:
                    result = context.copy().divmod(x, y)
                    cxs.append(Counterexample(
                        category="missing_error",
                        layer=layer.name,
                        inputs=(x, y),
                        expected=f"{ec.exception.__name__}",
                        actual=f"result={result}",
                        description=(
                            f"Error condition '{ec.name}' should have "
                            f"triggered but didn't"
                        ),
                    ))
                except ec.exception:
                    pass  # expected
                except Exception as e:
                    cxs.append(Counterexample(
                        category="wrong_error",
                        layer=layer.name,
                        inputs=(x, y),
                        expected=f"{ec.exception.__name__}",
                        actual=f"{type(e).__name__}: {e}",
                        description=f"Wrong exception type for '{ec.name}'",
                    ))

    return cxs, checks


def search_property_violations(
    context: Context,
    contract: DivModContract,
) -> tuple[list[Counterexample], int]:
    """Check every algebraic property over the grid."""
    cxs: list[Counterexample] = []
    checks = 0

    def op(x, y):
        return context.copy().divmod(x, y)

    for layer, prop in contract.all_properties:
        for values in itertools.product(GRIDS[layer], repeat=prop.arity):
            checks += 1
            try:
                ok = prop.check(op, *values)
            except ArithmeticError:
                continue
            if not ok:
                cxs.append(Counterexample(
                    category="property_violation",
                    layer=layer.name,
                    inputs=values,
                    expected=prop.description,
                    actual="property does not hold",
                    description=f"Property '{prop.name}' violated",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(context: Context) -> SearchReport:
    """Run complete counterexample search for one configuration."""
    contract = build_contract(context)
    report = SearchReport()

    for search_fn in (
        search_postcondition_violations,
        search_error_condition_violations,
        search_property_violations,
    ):
        cxs, checks = search_fn(context, contract)
        report.counterexamples.extend(cxs)
        report.checks_run += checks

    return report


def main() -> None:
    """Run counterexample search across several configurations."""
    configs = [
        ("53 bits / nearest / no traps", Context()),
        ("53 bits / down / no traps", Context(rounding="down")),
        ("113 bits / nearest / no traps", Context(precision=113)),
        ("53 bits / divzero+invalid traps", Context(
            traps=ConditionSet.of([Condition.DIVZERO, Condition.INVALID]),
        )),
        ("53 bits / invalid trap", Context(
            traps=ConditionSet.of([Condition.INVALID]),
        )),
    ]

    all_passed = True
    for name, context in configs:
        print(f"\n--- Configuration: {name} ---")
        report = run_search(context)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL CONFIGURATIONS PASSED")
    else:
        print("SOME CONFIGURATIONS HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
