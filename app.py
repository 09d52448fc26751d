"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from api import router, set_service_context
from context import DEFAULT_CONTEXT, Context


def create_app(context: Context | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional service context for testing; a writable copy of
    the defaults is used if omitted.  A read-only context is served
    through a writable copy as well.
    """
    if context is None:
        context = DEFAULT_CONTEXT.copy()
    elif context.readonly:
        context = context.copy()

    set_service_context(context)

    app = FastAPI(
        title="Divmod API",
        description=(
            "Floor divmod over a multiple-precision numeric tower: integers, "
            "exact rationals and arbitrary-precision reals, with IEEE-754 "
            "style sticky flags and traps. Complex operands are rejected."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
