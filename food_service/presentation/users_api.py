from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from food_service.presentation.dependencies import (
    provide,
    get_login_use_case,
    get_register_use_case,
    get_update_user_use_case,
    get_update_profile_use_case,
    get_change_password_use_case,
    get_upload_profile_image_use_case
)
from food_service.presentation.errors import to_http_exception
from food_service.presentation.schemas import (
    ChangePasswordRequest, CreateUserRequest, ErrorResponse, LoginRequest, RegisterRequest,
    UpdateProfileRequest, UpdateUserRequest, success
)
from food_service.application.users import (
    ChangePasswordDTO, CreateUserDTO, DeleteUserUseCase, GetUserUseCase, ListUsersUseCase, LoginDTO, LoginUseCase,
    RegisterDTO, RegisterUserUseCase, UpdateUserDTO, UpdateUserUseCase, ChangePasswordUseCase
)
from food_service.application.upload_profile_image import UploadProfileImageUseCase
from food_service.domain.exceptions import DomainException

router = APIRouter(tags=["users"])

ACCOUNT_FIELDS = {"id", "name", "email", "role"}


@router.get("/users")
async def list_users(use_case: ListUsersUseCase = Depends(provide(ListUsersUseCase))):
    try:
        users = await use_case()
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=[user.model_dump(include=ACCOUNT_FIELDS | {"created_at"}) for user in users])


@router.post("/users/login", responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})
async def login(request: LoginRequest, use_case: LoginUseCase = Depends(get_login_use_case)):
    try:
        user = await use_case(LoginDTO(email=request.email, password=request.password))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Login successful", data=user.model_dump(include=ACCOUNT_FIELDS))


@router.post(
    "/users/register",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def register(request: RegisterRequest, use_case: RegisterUserUseCase = Depends(get_register_use_case)):
    try:
        user = await use_case(RegisterDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="User registered successfully", data=user.model_dump(include=ACCOUNT_FIELDS))


@router.post(
    "/users",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    status_code=status.HTTP_201_CREATED
)
async def create_user(request: CreateUserRequest, use_case: RegisterUserUseCase = Depends(get_register_use_case)):
    """Admin creates an account with an explicit role"""
    try:
        user = await use_case(CreateUserDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="User created successfully", data=user.public())


@router.put(
    "/users/profile/{user_id}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def update_profile(
    user_id: int,
    request: UpdateProfileRequest,
    use_case: UpdateUserUseCase = Depends(get_update_profile_use_case)
):
    try:
        user = await use_case(user_id, UpdateUserDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Profile updated successfully", data=user.public())


@router.get("/users/{user_id}", responses={404: {"model": ErrorResponse}})
async def get_user(user_id: int, use_case: GetUserUseCase = Depends(provide(GetUserUseCase))):
    try:
        user = await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(data=user.model_dump(include=ACCOUNT_FIELDS))


@router.put(
    "/users/{user_id}",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case)
):
    try:
        user = await use_case(user_id, UpdateUserDTO(**request.model_dump()))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="User updated successfully", data=user.public())


@router.put(
    "/users/{user_id}/password",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def change_password(
    user_id: int,
    request: ChangePasswordRequest,
    use_case: ChangePasswordUseCase = Depends(get_change_password_use_case)
):
    try:
        await use_case(user_id, ChangePasswordDTO(
            current_password=request.current_password,
            new_password=request.new_password
        ))
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Password updated successfully")


@router.delete("/users/{user_id}", responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_user(user_id: int, use_case: DeleteUserUseCase = Depends(provide(DeleteUserUseCase))):
    try:
        await use_case(user_id)
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="User deleted successfully")


@router.post("/upload-profile-image", responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def upload_profile_image(
    image: Optional[UploadFile] = File(None),
    user_id: Optional[int] = Form(None),
    use_case: UploadProfileImageUseCase = Depends(get_upload_profile_image_use_case)
):
    """Store a profile picture and attach its public URL to the user"""
    try:
        image_url = await use_case(
            user_id=user_id,
            filename=image.filename if image else None,
            content_type=image.content_type if image else None,
            source=image
        )
    except DomainException as e:
        raise to_http_exception(e)
    return success(message="Profile image uploaded successfully", image_url=image_url)
