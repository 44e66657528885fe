import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.errors import (
    AlreadyOver,
    CapExceeded,
    DivideByZero,
    ExternalFailure,
    InvalidArgument,
    InvalidQuantity,
    InvalidRecipient,
    NotOver,
    Overflow,
    PreconditionFailed,
    SaleError,
    StageNotSellable,
    TooEarly,
    Unauthorized,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type, int] = {
    Unauthorized: status.HTTP_403_FORBIDDEN,
    InvalidArgument: status.HTTP_400_BAD_REQUEST,
    InvalidRecipient: status.HTTP_400_BAD_REQUEST,
    InvalidQuantity: status.HTTP_400_BAD_REQUEST,
    Overflow: status.HTTP_400_BAD_REQUEST,
    DivideByZero: status.HTTP_400_BAD_REQUEST,
    PreconditionFailed: status.HTTP_409_CONFLICT,
    NotOver: status.HTTP_409_CONFLICT,
    StageNotSellable: status.HTTP_409_CONFLICT,
    CapExceeded: status.HTTP_409_CONFLICT,
    AlreadyOver: status.HTTP_409_CONFLICT,
    TooEarly: status.HTTP_409_CONFLICT,
    ExternalFailure: status.HTTP_502_BAD_GATEWAY,
}


async def sale_error_handler(request: Request, exc: SaleError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    content = {"error": exc.code, "detail": exc.message}
    if isinstance(exc, PreconditionFailed):
        content["reason"] = exc.reason.value
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SaleError, sale_error_handler)
