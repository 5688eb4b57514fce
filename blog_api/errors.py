"""
Error taxonomy and the JSON error-response contract.

Every failure leaves the API as {"error": "<message>"} with one of four
status codes:

  BadRequest      400  malformed / missing input, wrong content type
  Unauthenticated 401  missing or invalid credential
  NotFound        404  missing resource, or one the caller does not own
  InternalError   500  unexpected store / provider failure

Store exceptions never reach the client: handlers wrap store calls in
store_errors(), which logs the traceback and raises a generic InternalError.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=type(self).status_code, detail=message, headers=headers)
        self.details = details


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "unauthorized") -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


@contextmanager
def store_errors(message: str):
    """Translate store failures inside the block into a generic 500."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception("Store failure: %s", message)
        raise InternalError(message)


# ─────────────────────────── Exception handlers ───────────────────────────

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = {"error": exc.detail}
    details = getattr(exc, "details", None)
    if details:
        body["details"] = details
    return JSONResponse(body, status_code=exc.status_code, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = "Invalid request parameters"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
