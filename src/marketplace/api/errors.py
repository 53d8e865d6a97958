"""Map marketplace errors onto HTTP responses.

Validation problems are 400s, unknown ids 404s and illegal state changes
409s carrying the specific reason. A payment that the gateway does not
confirm sends the buyer back to the payment step. Settlement failures that
were rolled back surface as a generic, retry-safe 409.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from marketplace.shared.errors import OrderNotCompletedError, PaymentMismatchError

logger = structlog.get_logger(__name__)


def _error(status_code: int, exc) -> JSONResponse:
    # Framework-raised not-found and conflict errors carry only a text argument
    messages = getattr(exc, "messages", None) or {"_entity": [str(exc)]}
    return JSONResponse(status_code=status_code, content={"error": messages})


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error(404, exc)


async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error(409, exc)


async def _order_not_completed(request: Request, exc: OrderNotCompletedError) -> JSONResponse:
    logger.warning("Order could not be completed", order_id=exc.order_id, path=request.url.path)
    return _error(409, exc)


async def _payment_mismatch(request: Request, exc: PaymentMismatchError) -> RedirectResponse:
    return RedirectResponse(url=f"/checkout/{exc.order_id}", status_code=303)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    app.add_exception_handler(OrderNotCompletedError, _order_not_completed)
    app.add_exception_handler(PaymentMismatchError, _payment_mismatch)
