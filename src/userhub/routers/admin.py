"""Admin-only session management."""

from typing import Annotated

from fastapi import APIRouter, Depends

from userhub.container import Container
from userhub.context import RequestContext
from userhub.dependencies import guarded
from userhub.schemas.auth import RevokeResponse
from userhub.schemas.error import error_responses


def build_router(container: Container) -> APIRouter:
    router = APIRouter(prefix="/api/v1/admin", tags=["admin"])
    auth = container.auth_service

    AdminOnly = Annotated[
        RequestContext,
        Depends(guarded(container.authenticate, container.require_admin)),
    ]

    @router.post(
        "/revoke-sessions",
        response_model=RevokeResponse,
        status_code=200,
        responses=error_responses(401, 403),
    )
    async def revoke_all_sessions(context: AdminOnly) -> RevokeResponse:
        """Revoke every active session, including the caller's."""
        await auth.revoke_all_sessions()
        return RevokeResponse(success=True, message="All sessions revoked successfully")

    @router.post(
        "/revoke-session/{user_id}",
        response_model=RevokeResponse,
        status_code=200,
        responses=error_responses(401, 403, 404),
    )
    async def revoke_user_sessions(user_id: str, context: AdminOnly) -> RevokeResponse:
        await auth.revoke_user_sessions(user_id)
        return RevokeResponse(success=True, message="Session revoked successfully")

    return router
