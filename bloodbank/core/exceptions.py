"""
Application errors and the FastAPI handlers that render them.

An eligibility verdict of ``False`` and "could not determine eligibility" are
different outcomes: the second one is always raised as ``DataStoreUnavailable``
and surfaces as HTTP 503, never as a verdict.
"""
import logging
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

UNAVAILABLE_DETAIL = "Unable to check eligibility right now"


class BloodBankError(Exception):
    """Base class for errors raised by the blood bank services."""


class DataStoreUnavailable(BloodBankError):
    """A read against the backing data store failed."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        detail = f"Data store read failed during {operation}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "N/A")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}",
        extra={"request_id": _request_id(request)},
    )
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "errors": jsonable_errors(exc)},
    )


async def data_store_exception_handler(request: Request, exc: DataStoreUnavailable):
    logger.error(f"{exc}", extra={"request_id": _request_id(request)})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": UNAVAILABLE_DETAIL},
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        extra={"request_id": _request_id(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serialisable context (e.g. exception objects) from pydantic errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        })
    return errors
