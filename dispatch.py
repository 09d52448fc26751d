"""Tower dispatch and the public divmod entry points.

``dispatch`` picks the lowest tower layer both operands convert into and
hands them to that layer's algorithm.  It answers ``NotImplemented`` for
operands outside the tower so operator hooks can fall through to the
reflected operand; the public entry points turn that into a TypeError.

Entry points
------------
div_mod(x, y, context=None)   module-level; ``divmod`` is an alias
Context.divmod(x, y)          context-bound, see context.py
divmod_fast(x, y)             ``__divmod__``-style, may return NotImplemented
"""
from __future__ import annotations

import logging

from algorithms import complex_divmod, integer_divmod, rational_divmod, real_divmod
from context import Context, get_context
from errors import UnsupportedOperandError
from tower import Layer, common_layer

logger = logging.getLogger(__name__)

ALGORITHMS = {
    Layer.INTEGER: integer_divmod,
    Layer.RATIONAL: rational_divmod,
    Layer.REAL: real_divmod,
    Layer.COMPLEX: complex_divmod,
}


def dispatch(x, y, context: Context):
    """Run the algorithm of the lowest common layer of ``x`` and ``y``.

    Branches: DISPATCH-INTEGER, DISPATCH-RATIONAL, DISPATCH-REAL,
              DISPATCH-COMPLEX, DISPATCH-UNSUPPORTED
    """
    layer = common_layer(x, y)
    if layer is None:                                             # DISPATCH-UNSUPPORTED
        return NotImplemented
    return ALGORITHMS[layer](x, y, context)                       # DISPATCH-<LAYER>


def divmod_fast(x, y):
    """Operator-hook form: current context, NotImplemented on mismatch."""
    return dispatch(x, y, get_context())


def number_divmod(x, y, context: Context):
    """Dispatch under an already resolved, writable context."""
    result = dispatch(x, y, context)
    if result is NotImplemented:
        logger.debug(
            "divmod unsupported for %s and %s",
            type(x).__name__,
            type(y).__name__,
        )
        raise UnsupportedOperandError("divmod() argument type not supported")
    return result


def div_mod(x, y, context: Context | None = None):
    """div_mod(x, y) -> (quotient, remainder)

    Return divmod(x, y) with floor semantics.  Without an explicit
    context the current context is used and keeps any flags raised.

    Branches: CTX-CURRENT
    """
    if context is None:                                           # CTX-CURRENT
        return number_divmod(x, y, get_context())
    return context.divmod(x, y)


# Same operation under the built-in's name, for callers that import it.
divmod = div_mod
