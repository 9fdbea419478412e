"""Error Handlers - map exceptions to the JSON error envelope.

Invariants:
    - MindPalaceError -> its own status and to_response() body
    - RequestValidationError (bad path kind, bad body) -> 400 VALIDATION_ERROR with
      one detail per failing field
    - Anything else -> 500 INTERNAL_ERROR, message never includes the exception text
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mindpalace.core.errors import ErrorCategory, ErrorSeverity, MindPalaceError

logger = logging.getLogger(__name__)


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    **fields,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **fields,
        },
    }


async def _domain_error(request: Request, exc: MindPalaceError) -> JSONResponse:
    log = logger.warning if exc.recoverable else logger.error
    log(
        f"{request.method} {request.url.path} refused: {exc.message}",
        extra=exc.log_extra(path=request.url.path),
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"Invalid request on {request.url.path}: {len(details)} field(s)",
        extra={"path": request.url.path, "error_code": "VALIDATION_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path, "error_code": "INTERNAL_ERROR"},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(MindPalaceError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_invalid)
    app.add_exception_handler(Exception, _unhandled)
