"""The single place where error responses are written.

``register_error_handlers`` installs exception handlers on the app:

- ``DomainError``: logged with the request snapshot, sent as-is.
- ``RequestValidationError``: rewrapped as a VALIDATION error listing each
  failing field as ``{path, message}`` in the order the validator reported.
- Starlette ``HTTPException`` (unknown route, wrong method, ...): rewrapped
  with the kind matching its status.
- Anything else: rewrapped as INTERNAL/SYSTEM with a generic message. The
  original message and stack are only attached when
  ``include_error_details`` is set.

Routers and services never build error bodies themselves; they raise.
"""

import traceback
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from userhub.exceptions import DomainError, ErrorDomain, ErrorKind
from userhub.logging import get_logger
from userhub.middleware import get_request_id

logger = get_logger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})

_KIND_BY_STATUS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}


def request_snapshot(request: Request) -> dict[str, Any]:
    """Request fields attached to every error log line. Secrets are redacted by the logger."""
    return {
        "id": get_request_id(request),
        "method": request.method,
        "url": str(request.url),
        "query": dict(request.query_params),
        "params": dict(request.path_params),
        "headers": dict(request.headers),
    }


def validation_error_from(errors: Sequence[Any]) -> DomainError:
    """Build a VALIDATION error from pydantic/FastAPI error dicts, keeping their order."""
    validation_errors = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ())]
        if len(location) > 1 and location[0] in _LOCATION_PREFIXES:
            location = location[1:]
        validation_errors.append({"path": ".".join(location), "message": error.get("msg", "")})
    return DomainError.validation(
        "Invalid input data.",
        ErrorDomain.VALIDATION,
        {"validationErrors": validation_errors},
    )


def http_error_from(exc: StarletteHTTPException) -> DomainError:
    if exc.status_code >= 500:
        kind = ErrorKind.INTERNAL
    else:
        kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.BAD_REQUEST)
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    return DomainError(message, ErrorDomain.SYSTEM, kind)


def _send(error: DomainError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_response())


def register_error_handlers(
    app: FastAPI,
    *,
    include_error_details: bool = False,
    log_errors: bool = True,
) -> None:
    def log_domain_error(request: Request, error: DomainError) -> None:
        if not log_errors:
            return
        logger.error(
            "domain_error",
            domain=str(error.domain),
            kind=str(error.kind),
            error_code=error.error_code,
            message=error.message,
            details=dict(error.details) if error.details is not None else None,
            request=request_snapshot(request),
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        log_domain_error(request, exc)
        return _send(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = validation_error_from(exc.errors())
        log_domain_error(request, error)
        return _send(error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        error = http_error_from(exc)
        log_domain_error(request, error)
        return _send(error)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unhandled exceptions and return a safe error response.

        Starlette runs this from its outermost middleware and re-raises the
        exception afterwards so the server can log it too; the response sent
        is still this one.
        """
        details = None
        if include_error_details:
            details = {
                "originalError": str(exc),
                "stack": "".join(traceback.format_exception(exc)),
            }
        error = DomainError.internal(UNEXPECTED_ERROR_MESSAGE, ErrorDomain.SYSTEM, details)

        logger.error(
            "unhandled_error",
            domain=str(error.domain),
            error_code=error.error_code,
            error=str(exc),
            request=request_snapshot(request),
            exc_info=exc,
        )
        return _send(error)
