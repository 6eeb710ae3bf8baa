from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request
from fastapi import status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.responses import Response

ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


class GatepassError(Exception):
    """Base class for errors that map onto a client-visible status."""

    status_code = http_status.HTTP_500_INTERNAL_SERVER_ERROR
    status = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(GatepassError):
    status_code = http_status.HTTP_400_BAD_REQUEST
    status = "validation_error"


class AuthorizationError(GatepassError):
    status_code = http_status.HTTP_401_UNAUTHORIZED
    status = "unauthorized"


class PaymentVerificationError(GatepassError):
    """The submitted payment confirmation was not issued by the gateway."""

    status_code = http_status.HTTP_400_BAD_REQUEST
    status = "failed"


class NotFoundError(GatepassError):
    status_code = http_status.HTTP_404_NOT_FOUND
    status = "not_found"


class BookingConflictError(GatepassError):
    status_code = http_status.HTTP_409_CONFLICT
    status = "conflict"


class PaymentGatewayError(GatepassError):
    status_code = http_status.HTTP_502_BAD_GATEWAY


class SerialAllocationError(GatepassError):
    pass


class PaymentConfigurationError(GatepassError):
    pass


async def gatepass_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, GatepassError) else GatepassError(str(exc))
    if error.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, error.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, AuthorizationError) else None
    return JSONResponse(
        status_code=error.status_code,
        content={"status": error.status, "message": error.message},
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content={
            "status": ValidationError.status,
            "message": "Invalid request",
            "errors": jsonable_encoder(errors),
        },
    )


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": "Internal server error"},
    )


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    GatepassError: gatepass_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: general_500_exception_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
