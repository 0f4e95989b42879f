"""Domain errors raised by guards, services and routers.

There is a single error type, ``DomainError``, tagged with an ``ErrorKind``
(which fixes the HTTP status) and an ``ErrorDomain`` (which only classifies
the error for logs and alerting). Exception handlers in ``error_handlers``
translate it into the standard error envelope:

    {"error": {"code": "...", "type": "...", "domain": "...",
               "message": "...", "timestamp": "...", "details": {...}}}
"""

import copy
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Self, assert_never


class ErrorKind(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    CONFLICT = "CONFLICT"
    BAD_REQUEST = "BAD_REQUEST"

    @property
    def status_code(self) -> int:
        """HTTP status for this kind. Fixed; never overridden per error."""
        match self:
            case ErrorKind.NOT_FOUND:
                return 404
            case ErrorKind.UNAUTHORIZED:
                return 401
            case ErrorKind.FORBIDDEN:
                return 403
            case ErrorKind.VALIDATION | ErrorKind.BAD_REQUEST:
                return 400
            case ErrorKind.INTERNAL:
                return 500
            case ErrorKind.EXTERNAL_SERVICE:
                return 502
            case ErrorKind.CONFLICT:
                return 409
            case _:
                assert_never(self)


class ErrorDomain(StrEnum):
    AUTH = "AUTH"
    USER = "USER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"
    VALIDATION = "VALIDATION"
    EXTERNAL = "EXTERNAL"


def _error_code(domain: ErrorDomain, kind: ErrorKind, timestamp: datetime) -> str:
    # e.g. AUTH-UNAUTHORIZED-20231005123456
    return f"{domain}-{kind}-{timestamp:%Y%m%d%H%M%S}"


class DomainError(Exception):
    """The one error type used for every expected failure.

    Instances are immutable: ``error_code`` and ``timestamp`` are fixed at
    construction, ``details`` is a read-only deep copy of what was passed in,
    and ``status_code`` is always ``kind.status_code``.
    """

    message: str
    domain: ErrorDomain
    kind: ErrorKind
    details: Mapping[str, Any] | None
    timestamp: datetime
    error_code: str

    def __init__(
        self,
        message: str,
        domain: ErrorDomain,
        kind: ErrorKind,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        timestamp = datetime.now(UTC)
        fields = {
            "message": message,
            "domain": ErrorDomain(domain),
            "kind": ErrorKind(kind),
            "details": (
                MappingProxyType(copy.deepcopy(dict(details))) if details is not None else None
            ),
            "timestamp": timestamp,
            "error_code": _error_code(ErrorDomain(domain), ErrorKind(kind), timestamp),
        }
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: object) -> None:
        # The interpreter still needs __traceback__, __cause__, __notes__ ...
        if name.startswith("__"):
            super().__setattr__(name, value)
            return
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"DomainError({self.error_code!r}, {self.message!r})"

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_response(self) -> dict[str, Any]:
        """Serialize to the error envelope sent to clients."""
        timestamp = self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return {
            "error": {
                "code": self.error_code,
                "type": str(self.kind),
                "domain": str(self.domain),
                "message": self.message,
                "timestamp": timestamp,
                "details": copy.deepcopy(dict(self.details)) if self.details is not None else None,
            }
        }

    # -- named constructors -------------------------------------------------

    @classmethod
    def not_found(
        cls,
        message: str = "Resource not found.",
        domain: ErrorDomain = ErrorDomain.SYSTEM,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.NOT_FOUND, details)

    @classmethod
    def unauthorized(
        cls,
        message: str = "You need to be logged in to access this resource.",
        domain: ErrorDomain = ErrorDomain.AUTH,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.UNAUTHORIZED, details)

    @classmethod
    def forbidden(
        cls,
        message: str = "You do not have permission to access this resource.",
        domain: ErrorDomain = ErrorDomain.AUTH,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.FORBIDDEN, details)

    @classmethod
    def validation(
        cls,
        message: str = "Invalid input data.",
        domain: ErrorDomain = ErrorDomain.VALIDATION,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.VALIDATION, details)

    @classmethod
    def internal(
        cls,
        message: str = "Internal server error. Please try again later.",
        domain: ErrorDomain = ErrorDomain.SYSTEM,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.INTERNAL, details)

    @classmethod
    def external_service(
        cls,
        message: str = "External service error.",
        domain: ErrorDomain = ErrorDomain.EXTERNAL,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.EXTERNAL_SERVICE, details)

    @classmethod
    def conflict(
        cls,
        message: str = "Resource already exists.",
        domain: ErrorDomain = ErrorDomain.SYSTEM,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.CONFLICT, details)

    @classmethod
    def bad_request(
        cls,
        message: str = "Bad request.",
        domain: ErrorDomain = ErrorDomain.SYSTEM,
        details: Mapping[str, Any] | None = None,
    ) -> Self:
        return cls(message, domain, ErrorKind.BAD_REQUEST, details)
