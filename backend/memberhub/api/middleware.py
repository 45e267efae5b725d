"""Middleware and exception handlers for the FastAPI application.

The exception handlers are the only place where error kinds become HTTP status codes.
Encryption faults and anything uncategorized become a 500 with a generic body; the
detail goes to the logs only.
"""

import time
import traceback
import uuid
from typing import Union

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from memberhub.core.exceptions import (
    EmailEncryptionError,
    ForbiddenAccessException,
    InvalidArgumentException,
    MemberHubException,
    ResourceNotFoundException,
    UnauthorizedAccessException,
    unpack_validation_error,
)
from memberhub.core.logging import logger

INTERNAL_ERROR_DETAIL = "Internal Server Error"


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    return await call_next(request)


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests with their duration and status."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions.

    The full traceback is logged; the caller only receives a generic message.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.with_context(request_id=getattr(request.state, "request_id", None)).error(
            f"Unhandled exception: {exc}\n{traceback.format_exc()}"
        )
        return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, ValidationError]
) -> JSONResponse:
    """Exception handler for request and schema validation errors.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (Union[RequestValidationError, ValidationError]): The exception object that was raised.

    Returns:
    -------
        JSONResponse: A 400 Bad Request response listing the invalid fields, like
            ``{"errors": [{"body.invitation_id": "Input should be greater than 0"}]}``.

    """
    error_messages = unpack_validation_error(exc)
    logger.info(f"Validation error: {error_messages}")
    return JSONResponse(status_code=400, content=error_messages)


async def unauthorized_exception_handler(
    request: Request, exc: UnauthorizedAccessException
) -> JSONResponse:
    """Exception handler for UnauthorizedAccessException, a 401."""
    return JSONResponse(status_code=401, content={"detail": str(exc)})


async def forbidden_exception_handler(
    request: Request, exc: ForbiddenAccessException
) -> JSONResponse:
    """Exception handler for ForbiddenAccessException, a 403."""
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def invalid_argument_exception_handler(
    request: Request, exc: InvalidArgumentException
) -> JSONResponse:
    """Exception handler for InvalidArgumentException, a 400."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def not_found_exception_handler(
    request: Request, exc: ResourceNotFoundException
) -> JSONResponse:
    """Exception handler for ResourceNotFoundException, a 404."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def email_encryption_exception_handler(
    request: Request, exc: EmailEncryptionError
) -> JSONResponse:
    """Exception handler for encryption faults.

    These indicate misconfiguration or corrupted stored data, so they are logged at
    error level and reported to the caller as a generic 500.
    """
    logger.with_context(
        request_id=getattr(request.state, "request_id", None),
        error_type=exc.__class__.__name__,
    ).error(f"Email encryption failure: {exc}")
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


async def memberhub_exception_handler(request: Request, exc: MemberHubException) -> JSONResponse:
    """Fallback for MemberHubException types without a dedicated handler, a 500."""
    logger.with_context(
        request_id=getattr(request.state, "request_id", None),
        error_type=exc.__class__.__name__,
    ).error(f"Unhandled service error: {exc}")
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})
