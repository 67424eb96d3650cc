import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.core.exceptions import ServiceError
from storefront.models.dto.common import ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(kind=kind, message=message).model_dump(by_alias=True),
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return _error(exc.status_code, exc.kind, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return _error(400, "validation_error", message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
