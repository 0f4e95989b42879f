"""Error response schemas.

Every error response uses the same envelope, built by ``DomainError.to_response``:
{"error": {"code", "type", "domain", "message", "timestamp", "details"}}.
These models document it in the OpenAPI schema; routers reference them
through ``error_responses``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from userhub.exceptions import ErrorDomain, ErrorKind


class ErrorDetail(BaseModel):
    """Inner error object."""

    code: str
    type: ErrorKind
    domain: ErrorDomain
    message: str
    timestamp: datetime
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned by all error responses."""

    error: ErrorDetail


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """``responses=`` mapping for a route that can fail with ``status_codes``."""
    return {code: {"model": ErrorResponse} for code in status_codes}
