"""Exception handlers and error middleware for the Products API."""

import logging
from typing import Any, Dict, List, Sequence

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from database.document_store import DocumentNotFoundError

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "The given data was invalid."
_REQUEST_LOCATIONS = ("body", "query", "path", "form", "header", "cookie")


def _field_name(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in _REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(str(part) for part in parts) or "__root__"


def _message(error: Dict[str, Any]) -> str:
    msg = error.get("msg", "Invalid value")
    return msg.removeprefix("Value error, ")


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic error entries by dotted field name, e.g. ``images.0.filename``."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        grouped.setdefault(_field_name(error.get("loc", ())), []).append(_message(error))
    return grouped


def _validation_response(errors: Sequence[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": VALIDATION_FAILED_MESSAGE,
            "errors": format_validation_errors(errors),
        },
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    return _validation_response(exc.errors())


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _validation_response(exc.errors())


async def handle_document_not_found(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": "No data is found"},
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception:  # pylint: disable=broad-except
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
