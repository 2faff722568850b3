"""
Global Error Handling

Application-wide exception handlers for the resolver service.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- Report contract errors (bad input shape) as 422, never as 500
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("resolver.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class InvalidRequestError(ValueError):
    """Raised for malformed classification input, before any remote call."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def contract_error_handler(
    request: Request,
    exc: InvalidRequestError,
) -> JSONResponse:
    """
    Handler for input contract violations raised below the request model
    (for example an unknown category name reaching the orchestrator).

    Returns
    -------
    JSONResponse
        A JSON 422 response carrying the validation message.
    """
    logger.info(
        "Rejected request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )

    payload: Dict[str, Any] = {
        "error": "invalid_request",
        "detail": str(exc),
    }

    return JSONResponse(
        status_code=422,
        content=payload,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
