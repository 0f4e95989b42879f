"""Shared FastAPI dependencies.

``request_context`` builds the immutable per-request context; ``guarded``
turns an ordered list of guards into a dependency that runs them before the
handler and hands the handler the resulting context.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from userhub.config import settings
from userhub.context import Credentials, RequestContext
from userhub.db.session import get_db
from userhub.guards import Guard, run_guards
from userhub.middleware import get_request_id

DB = Annotated[AsyncSession, Depends(get_db)]


def extract_credentials(request: Request, cookie_name: str) -> Credentials:
    bearer_token = None
    scheme, _, value = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        bearer_token = value.strip()
    return Credentials(bearer_token=bearer_token, cookie_token=request.cookies.get(cookie_name))


def request_context(request: Request) -> RequestContext:
    """Per-request context. FastAPI caches it, so it is built once per request."""
    cookie_name = getattr(request.app.state, "session_cookie_name", settings.session_cookie_name)
    return RequestContext(
        request_id=get_request_id(request),
        method=request.method,
        url=str(request.url),
        credentials=extract_credentials(request, cookie_name),
    )


def guarded(*guards: Guard) -> Callable[..., Awaitable[RequestContext]]:
    """Dependency running ``guards`` in order, short-circuiting on the first failure.

    Usage in a router factory:
        AdminOnly = Annotated[RequestContext, Depends(guarded(authenticate, require_admin))]

        @router.get("/")
        async def list_users(context: AdminOnly): ...
    """

    async def run(
        context: Annotated[RequestContext, Depends(request_context)],
    ) -> RequestContext:
        return await run_guards(context, guards)

    return run
