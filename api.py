"""FastAPI endpoints for floor divmod.

Routes
------
POST   /divmod           Compute (quotient, remainder) for two operands
GET    /context          Settings and sticky flags of the service context
DELETE /context/flags    Clear the service context's sticky flags

Handlers that touch the shared service context are coroutines.  They run
on the event loop one at a time, never in the worker threadpool, so its
sticky flags are not updated concurrently.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from context import Context
from dispatch import div_mod
from models import ContextState, DivModRequest, DivModResponse, OperandKind
from tower import common_layer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["divmod"])

# The service context is injected by the app factory (see app.py).
_context: Context | None = None


def set_service_context(context: Context) -> None:
    """Inject the service context. Called once at app startup."""
    global _context
    _context = context


def get_service_context() -> Context:
    assert _context is not None, "Service context not initialized"
    return _context


# ---------------------------------------------------------------------------
# Error helpers
# ---------------------------------------------------------------------------

def _arithmetic_error(e: ArithmeticError) -> HTTPException:
    return HTTPException(status_code=422, detail=f"{type(e).__name__}: {e}")


def _type_error(e: TypeError) -> HTTPException:
    return HTTPException(status_code=400, detail=f"{type(e).__name__}: {e}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/divmod", response_model=DivModResponse)
async def compute_divmod(payload: DivModRequest) -> DivModResponse:
    """Floor divmod of ``x`` by ``y``."""
    if payload.context is not None:
        context = payload.context.to_context()
    else:
        context = get_service_context()

    try:
        x = payload.x.to_number(context)
        y = payload.y.to_number(context)
    except ValueError as e:
        logger.info("rejected operand: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e

    try:
        quotient, remainder = div_mod(x, y, context)
    except ArithmeticError as e:
        logger.info("divmod failed: %s", e)
        raise _arithmetic_error(e) from e
    except TypeError as e:
        logger.info("divmod rejected: %s", e)
        raise _type_error(e) from e

    return DivModResponse(
        quotient=str(quotient),
        remainder=str(remainder),
        layer=OperandKind(common_layer(x, y).name.lower()),
        flags=context.flags.active(),
    )


@router.get("/context", response_model=ContextState)
async def read_context() -> ContextState:
    """Settings and sticky flags of the service context."""
    return ContextState.from_context(get_service_context())


@router.delete("/context/flags", response_model=ContextState)
async def clear_context_flags() -> ContextState:
    """Clear the sticky flags of the service context."""
    context = get_service_context()
    context.clear_flags()
    return ContextState.from_context(context)
