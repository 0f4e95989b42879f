"""Auth request/response schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from userhub.context import Role
from userhub.schemas.user import CamelModel


# bcrypt only looks at the first 72 bytes and newer releases refuse longer input.
MAX_PASSWORD_BYTES = 72


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    name: str = Field(min_length=2, max_length=100)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class SessionUserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: Role | None = None
    email_verified: bool


class TokenResponse(CamelModel):
    access_token: str
    expires_in: int


class LoginData(BaseModel):
    user: SessionUserResponse
    token: TokenResponse


class LoginResponse(BaseModel):
    message: str
    data: LoginData


class SignUpData(BaseModel):
    user: SessionUserResponse


class SignUpResponse(BaseModel):
    message: str
    data: SignUpData


class MessageResponse(BaseModel):
    message: str


class RevokeResponse(BaseModel):
    success: bool
    message: str
