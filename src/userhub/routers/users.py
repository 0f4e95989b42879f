"""User endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from userhub.container import Container
from userhub.context import RequestContext, Role
from userhub.dependencies import guarded
from userhub.exceptions import DomainError, ErrorDomain
from userhub.schemas.error import error_responses
from userhub.schemas.user import DeleteUserResponse, UpdateUserRequest, UserResponse


def build_router(container: Container) -> APIRouter:
    router = APIRouter(prefix="/api/v1/users", tags=["users"])
    users = container.user_service

    Authenticated = Annotated[RequestContext, Depends(guarded(container.authenticate))]
    AdminOnly = Annotated[
        RequestContext,
        Depends(guarded(container.authenticate, container.require_admin)),
    ]

    @router.get(
        "",
        response_model=list[UserResponse],
        status_code=200,
        responses=error_responses(401, 403),
    )
    async def list_users(context: AdminOnly) -> list[UserResponse]:
        """List all users. Admins only."""
        return [UserResponse.model_validate(user) for user in await users.get_users()]

    @router.get(
        "/{user_id}",
        response_model=UserResponse,
        status_code=200,
        responses=error_responses(401, 404),
    )
    async def get_user(user_id: str, context: Authenticated) -> UserResponse:
        return UserResponse.model_validate(await users.get_user_by_id(user_id))

    @router.put(
        "/{user_id}",
        response_model=UserResponse,
        status_code=200,
        responses=error_responses(400, 401, 403, 404, 409),
    )
    async def update_user(
        user_id: str,
        payload: UpdateUserRequest,
        context: Authenticated,
    ) -> UserResponse:
        """Update name, email or role. Only admins may change a role."""
        caller = context.session.user  # type: ignore[union-attr]
        if payload.role is not None and caller.role != Role.ADMIN:
            raise DomainError.forbidden(
                "Only administrators can change user roles.",
                ErrorDomain.ADMIN,
                {
                    "requestId": context.request_id,
                    "userRole": caller.role or "Unknown",
                    "requiredRole": Role.ADMIN.value,
                },
            )

        user = await users.update_user(
            user_id,
            email=payload.email,
            name=payload.name,
            role=payload.role,
        )
        return UserResponse.model_validate(user)

    @router.delete(
        "/{user_id}",
        response_model=DeleteUserResponse,
        status_code=200,
        responses=error_responses(401, 404),
    )
    async def delete_user(user_id: str, context: Authenticated) -> DeleteUserResponse:
        result = await users.delete_user(user_id)
        return DeleteUserResponse(success=result.success, message=result.message)

    return router
