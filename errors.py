import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class Unauthorized(ApiError):
    status_code = 401
    message = "Unauthorized"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class StoreUnavailable(ApiError):
    status_code = 500
    message = "Database error"


class UpstreamFetchError(ApiError):
    status_code = 500
    message = "Upstream request failed"


def error_response(exc: ApiError, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def describe_errors(errors) -> str:
    # "body.price: Input should be greater than or equal to 0"
    return "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in errors
    )


async def api_error_handler(request: Request, exc: ApiError):
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(ValidationError("Missing or invalid fields", describe_errors(exc.errors())))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error("Store operation failed on %s %s: %s", request.method, request.url.path, exc)
    return error_response(StoreUnavailable(details=str(exc)))


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(ApiError())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
