from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis import RedisError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from foh.api.middleware.request_id import get_request_id
from foh.application.use_cases.billing import (
    BillAlreadyExistsError,
    BillConflictError,
    BillNotFoundError,
    InvalidBillRequestError,
    InvalidPaymentTransitionError,
    TableReleaseConflictError,
)
from foh.application.use_cases.create_order import InvalidOrderError, MenuItemUnavailableError
from foh.application.use_cases.get_order import InvalidOrderQueryError, OrderNotFoundError
from foh.application.use_cases.quote_cart import InvalidCartError
from foh.application.use_cases.tables import (
    InvalidTableError,
    InvalidTableTransitionError,
    TableNotFoundError,
    TableUnavailableError,
)
from foh.application.use_cases.update_order_status import (
    InvalidOrderStatusError,
    InvalidOrderTransitionError,
    OrderConflictError,
)

logger = logging.getLogger("foh.api.errors")


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str, retryable: bool | None = None):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        details = dict(details) if isinstance(details, dict) else {}
        if retryable is not None:
            details["retryable"] = retryable
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details,
        )

    return handler


async def _store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "store_unavailable",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return _error_response(
        status_code=503,
        code="STORE_UNAVAILABLE",
        message="a backing store is unavailable",
        details={"retryable": True},
    )


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": jsonable_encoder(validation_exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str, bool | None]] = [
        (TableNotFoundError, 404, "TABLE_NOT_FOUND", None),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND", None),
        (BillNotFoundError, 404, "BILL_NOT_FOUND", None),
        (InvalidTableError, 400, "INVALID_TABLE", None),
        (InvalidOrderError, 400, "INVALID_ORDER", None),
        (InvalidOrderStatusError, 400, "INVALID_ORDER", None),
        (InvalidOrderQueryError, 400, "INVALID_REQUEST", None),
        (MenuItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE", None),
        (InvalidCartError, 400, "INVALID_CART", None),
        (InvalidBillRequestError, 400, "INVALID_REQUEST", None),
        (TableUnavailableError, 409, "TABLE_UNAVAILABLE", True),
        (TableReleaseConflictError, 409, "TABLE_RELEASE_CONFLICT", True),
        (OrderConflictError, 409, "CONFLICT", True),
        (BillConflictError, 409, "CONFLICT", True),
        (InvalidTableTransitionError, 409, "INVALID_TABLE_TRANSITION", False),
        (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION", False),
        (InvalidPaymentTransitionError, 409, "INVALID_PAYMENT_TRANSITION", False),
        (BillAlreadyExistsError, 409, "BILL_ALREADY_EXISTS", False),
    ]

    for exc_cls, status_code, code, retryable in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code, retryable))

    app.add_exception_handler(SQLAlchemyError, _store_unavailable_handler)
    app.add_exception_handler(RedisError, _store_unavailable_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
