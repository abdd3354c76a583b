"""HTTP mapping for storefront exceptions.

Protean's ``register_exception_handlers`` covers the framework's own
exceptions (``ValidationError`` as 400, ``ObjectNotFoundError`` as 404).
The handlers here add the storefront-specific status codes; Starlette picks
the most specific registered class, so these win over the generic 400.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    CheckoutError,
    ForbiddenError,
    IllegalTransitionError,
    StockConflictError,
    TransitionNotPermittedError,
    UnauthenticatedError,
)

_VALIDATION_STATUS = {
    CheckoutError: 400,
    StockConflictError: 409,
    IllegalTransitionError: 409,
    TransitionNotPermittedError: 403,
}

_ACCESS_STATUS = {
    UnauthenticatedError: 401,
    ForbiddenError: 403,
}


def _validation_handler(status_code):
    async def handler(request: Request, exc):
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


def _access_handler(status_code):
    async def handler(request: Request, exc):
        return JSONResponse(status_code=status_code, content={"error": exc.message})

    return handler


def register_storefront_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for exc_class, status_code in _VALIDATION_STATUS.items():
        app.add_exception_handler(exc_class, _validation_handler(status_code))
    for exc_class, status_code in _ACCESS_STATUS.items():
        app.add_exception_handler(exc_class, _access_handler(status_code))
