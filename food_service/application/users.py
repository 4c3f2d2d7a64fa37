import logging
from typing import List, Optional
from pydantic import BaseModel

from food_service.domain.models import ADMIN_ROLE, USER_ROLE, User
from food_service.domain.exceptions import (
    ConflictError, InvalidInputError, LastAdminError, UnauthorizedError, UserNotFoundError
)
from food_service.application.interfaces import PasswordHasher

logger = logging.getLogger(__name__)


class LoginDTO(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterDTO(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class CreateUserDTO(RegisterDTO):
    role: Optional[str] = None


class UpdateUserDTO(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    profile_image: Optional[str] = None


class ChangePasswordDTO(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class ListUsersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self) -> List[User]:
        async with self._uow() as uow:
            return await uow.users.list()


class GetUserUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> User:
        async with self._uow() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise UserNotFoundError("User not found")
            return user


class LoginUseCase:
    def __init__(self, unit_of_work, password_hasher: PasswordHasher):
        self._uow = unit_of_work
        self._hasher = password_hasher

    async def __call__(self, dto: LoginDTO) -> User:
        if not dto.email or not dto.password:
            raise InvalidInputError("Email and password are required")

        async with self._uow() as uow:
            user = await uow.users.get_by_email(dto.email)

        if not user or not self._hasher.verify(dto.password, user.password):
            logger.info(f"Failed login for {dto.email}")
            raise UnauthorizedError("Invalid credentials")
        return user


class RegisterUserUseCase:
    """Self sign-up (role is always `user`) and, with a role, admin creation"""

    def __init__(self, unit_of_work, password_hasher: PasswordHasher):
        self._uow = unit_of_work
        self._hasher = password_hasher

    async def __call__(self, dto: RegisterDTO) -> User:
        role = getattr(dto, "role", USER_ROLE)
        if not dto.name or not dto.email or not dto.password or not role:
            raise InvalidInputError("All fields are required")

        async with self._uow() as uow:
            if await uow.users.email_taken(dto.email):
                raise ConflictError("Email already exists")
            user = await uow.users.create(
                name=dto.name,
                email=dto.email,
                password=self._hasher.hash(dto.password),
                role=role
            )
            await uow.commit()

        logger.info(f"User {user.id} registered with role {user.role}")
        return user


class UpdateUserUseCase:
    def __init__(self, unit_of_work, password_hasher: PasswordHasher, allow_role_change: bool = True):
        self._uow = unit_of_work
        self._hasher = password_hasher
        self._allow_role_change = allow_role_change

    async def __call__(self, user_id: int, dto: UpdateUserDTO) -> User:
        if not dto.name or not dto.email:
            raise InvalidInputError("Name and email are required")

        async with self._uow() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise UserNotFoundError("User not found")

            if dto.email != user.email and await uow.users.email_taken(dto.email, exclude_user_id=user_id):
                raise ConflictError("Email already exists")

            values = {"name": dto.name, "email": dto.email}
            if dto.password:
                values["password"] = self._hasher.hash(dto.password)
            if self._allow_role_change and dto.role:
                values["role"] = dto.role
            if dto.profile_image:
                values["profile_image"] = dto.profile_image

            updated = await uow.users.update(user_id, values)
            if not updated:
                raise UserNotFoundError("User not found")
            await uow.commit()

        logger.info(f"User {user_id} updated: {', '.join(sorted(values))}")
        return updated


class ChangePasswordUseCase:
    def __init__(self, unit_of_work, password_hasher: PasswordHasher):
        self._uow = unit_of_work
        self._hasher = password_hasher

    async def __call__(self, user_id: int, dto: ChangePasswordDTO) -> None:
        if not dto.current_password or not dto.new_password:
            raise InvalidInputError("Current password and new password are required")

        async with self._uow() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise UserNotFoundError("User not found")
            if not self._hasher.verify(dto.current_password, user.password):
                raise UnauthorizedError("Current password is incorrect")

            await uow.users.update(user_id, {"password": self._hasher.hash(dto.new_password)})
            await uow.commit()

        logger.info(f"Password changed for user {user_id}")


class DeleteUserUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, user_id: int) -> None:
        async with self._uow() as uow:
            user = await uow.users.get_by_id(user_id)
            if not user:
                raise UserNotFoundError("User not found")

            if user.is_admin() and await uow.users.count_by_role(ADMIN_ROLE) <= 1:
                logger.warning(f"Refused to delete user {user_id}: last admin")
                raise LastAdminError()

            if not await uow.users.delete(user_id):
                raise UserNotFoundError("User not found")
            await uow.commit()

        logger.info(f"User {user_id} deleted")
