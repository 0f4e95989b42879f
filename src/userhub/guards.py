"""Pre-handler authorization guards.

A guard is an async callable ``(RequestContext) -> RequestContext``. It either
returns a context (possibly with more attached to it) or raises a
``DomainError``. Routes declare their guards as an ordered list; ``run_guards``
executes them one after another and stops at the first failure.

Guards never let a raw exception escape: anything unexpected is rewrapped
as a typed error so the client always gets the standard envelope.
"""

from collections.abc import Awaitable, Callable, Sequence

from userhub.context import Credentials, RequestContext, Role, Session
from userhub.exceptions import DomainError, ErrorDomain
from userhub.logging import get_logger

logger = get_logger(__name__)

Guard = Callable[[RequestContext], Awaitable[RequestContext]]
SessionResolver = Callable[[Credentials], Awaitable[Session | None]]


class AuthenticationGuard:
    """Require a logged-in user, resolving the session at most once."""

    def __init__(self, resolve_session: SessionResolver) -> None:
        self._resolve_session = resolve_session

    async def __call__(self, context: RequestContext) -> RequestContext:
        if context.is_authenticated:
            return context

        try:
            session = await self._resolve_session(context.credentials)
        except Exception as exc:
            logger.error("session_resolution_failed", error=str(exc))
            raise DomainError.unauthorized(
                "Error verifying authentication.",
                ErrorDomain.AUTH,
                {"requestId": context.request_id, "originalError": str(exc)},
            ) from exc

        if session is None or session.user is None:
            raise DomainError.unauthorized(
                "You need to be logged in to access this resource.",
                ErrorDomain.AUTH,
                {"requestId": context.request_id},
            )

        return context.with_session(session)


class AdminGuard:
    """Require the attached session to belong to an ADMIN.

    Must run after ``AuthenticationGuard``.
    """

    async def __call__(self, context: RequestContext) -> RequestContext:
        try:
            if not context.is_authenticated:
                # Wired without AuthenticationGuard in front of it.
                raise DomainError.unauthorized(
                    "You need to be logged in to access this resource.",
                    ErrorDomain.AUTH,
                    {"requestId": context.request_id},
                )

            role = context.session.user.role  # type: ignore[union-attr]
            if role != Role.ADMIN:
                raise DomainError.forbidden(
                    "You do not have permission to access this resource.",
                    ErrorDomain.ADMIN,
                    {
                        "requestId": context.request_id,
                        "userRole": role or "Unknown",
                        "requiredRole": Role.ADMIN.value,
                    },
                )
        except DomainError:
            raise
        except Exception as exc:
            logger.error("admin_check_failed", error=str(exc))
            raise DomainError.forbidden(
                "Error verifying permissions.",
                ErrorDomain.ADMIN,
                {"requestId": context.request_id, "originalError": str(exc)},
            ) from exc

        return context


async def run_guards(context: RequestContext, guards: Sequence[Guard]) -> RequestContext:
    """Run ``guards`` in order, feeding each the context returned by the last."""
    for guard in guards:
        context = await guard(context)
    return context
