"""Signup, login and logout endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from userhub.container import Container
from userhub.context import RequestContext
from userhub.dependencies import guarded
from userhub.schemas.auth import (
    LoginData,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SessionUserResponse,
    SignUpData,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
)
from userhub.schemas.error import error_responses


def build_router(container: Container) -> APIRouter:
    router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
    auth = container.auth_service
    settings = container.settings

    Authenticated = Annotated[RequestContext, Depends(guarded(container.authenticate))]

    @router.post(
        "/signup",
        response_model=SignUpResponse,
        status_code=201,
        responses=error_responses(400, 409),
    )
    async def sign_up(payload: SignUpRequest) -> SignUpResponse:
        result = await auth.sign_up(
            email=payload.email, password=payload.password, name=payload.name
        )
        return SignUpResponse(
            message="Signup successful",
            data=SignUpData(user=SessionUserResponse.model_validate(result.user)),
        )

    @router.post(
        "/login",
        response_model=LoginResponse,
        status_code=200,
        responses=error_responses(400, 401),
    )
    async def login(payload: LoginRequest, request: Request, response: Response) -> LoginResponse:
        """Authenticate with email and password.

        The session token is returned in the body (for bearer use) and set
        as an httpOnly cookie (for browsers).
        """
        result = await auth.sign_in(
            email=payload.email,
            password=payload.password,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        response.set_cookie(
            settings.session_cookie_name,
            result.token.access_token,
            max_age=result.token.expires_in,
            httponly=True,
            secure=settings.environment == "production",
            samesite="lax",
        )
        return LoginResponse(
            message="Login successful",
            data=LoginData(
                user=SessionUserResponse.model_validate(result.user),
                token=TokenResponse(
                    access_token=result.token.access_token,
                    expires_in=result.token.expires_in,
                ),
            ),
        )

    @router.post(
        "/logout",
        response_model=MessageResponse,
        status_code=200,
        responses=error_responses(401),
    )
    async def logout(context: Authenticated, response: Response) -> MessageResponse:
        """Revoke the session the request was authenticated with."""
        await auth.sign_out(context.session.token)  # type: ignore[union-attr]
        response.delete_cookie(settings.session_cookie_name)
        return MessageResponse(message="Signout successful")

    return router
