"""User business logic.

Turns repository misses and clashes into ``DomainError``s. Anything the
repository raises on its own (driver errors, timeouts) is left to propagate
to the error handler, which reports it as an internal error.
"""

from dataclasses import dataclass

from userhub.exceptions import DomainError, ErrorDomain
from userhub.logging import get_logger
from userhub.models import User
from userhub.repositories.user import UserRepository, email_in_use

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeleteResult:
    success: bool
    message: str


def _not_found(user_id: str) -> DomainError:
    return DomainError.not_found(
        f"User with ID {user_id} not found.", ErrorDomain.USER, {"userId": user_id}
    )


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def get_users(self) -> list[User]:
        return await self._users.find_many()

    async def get_user_by_id(self, user_id: str) -> User:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise _not_found(user_id)
        return user

    async def update_user(
        self,
        user_id: str,
        *,
        email: str | None = None,
        name: str | None = None,
        role: str | None = None,
    ) -> User:
        """Apply the given fields to the user; ``None`` leaves a field unchanged.

        Raises NOT_FOUND for an unknown id and CONFLICT when the new email is
        already registered to someone else. Emails are stored lowercase, so
        the check ignores case. Re-submitting one's own email is not a conflict.
        """
        if await self._users.find_by_id(user_id) is None:
            raise _not_found(user_id)

        if email is not None:
            email = email.lower()
        changes = {
            field: value
            for field, value in {"email": email, "name": name, "role": role}.items()
            if value is not None
        }

        if email is not None:
            owner = await self._users.find_by_email(email)
            if owner is not None and owner.id != user_id:
                raise email_in_use(email)

        user = await self._users.update(user_id, changes)
        if user is None:
            # Deleted between the existence check and the write.
            raise _not_found(user_id)

        logger.info("user_updated", user_id=user_id, fields=sorted(changes))
        return user

    async def delete_user(self, user_id: str) -> DeleteResult:
        if await self._users.find_by_id(user_id) is None:
            raise _not_found(user_id)

        await self._users.delete(user_id)
        logger.info("user_deleted", user_id=user_id)
        return DeleteResult(success=True, message="User deleted successfully.")
