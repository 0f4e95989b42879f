"""User request/response schemas.

Field names are snake_case in Python and camelCase on the wire
(``emailVerified``, ``createdAt``), matching the auth endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from userhub.context import Role


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: Role
    email_verified: bool
    created_at: datetime
    updated_at: datetime


class UpdateUserRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    name: str | None = Field(default=None, min_length=2, max_length=100)
    role: Role | None = None


class DeleteUserResponse(BaseModel):
    success: bool
    message: str
