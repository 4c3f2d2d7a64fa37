from fastapi import Depends, Request

from food_service.config import Settings
from food_service.application.interfaces import ObjectStorage, PasswordHasher
from food_service.application.update_order_status import UpdateOrderStatusUseCase
from food_service.application.upload_profile_image import UploadProfileImageUseCase
from food_service.application.users import (
    ChangePasswordUseCase, LoginUseCase, RegisterUserUseCase, UpdateUserUseCase
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_unit_of_work(request: Request):
    return request.app.state.unit_of_work


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.object_storage


def provide(use_case_cls):
    """Dependency building a use case that needs only the unit of work"""
    def factory(uow=Depends(get_unit_of_work)):
        return use_case_cls(uow)
    factory.__name__ = f"get_{use_case_cls.__name__}"
    return factory


def get_update_order_status_use_case(uow=Depends(get_unit_of_work)):
    return UpdateOrderStatusUseCase(uow)


def get_login_use_case(uow=Depends(get_unit_of_work), hasher: PasswordHasher = Depends(get_password_hasher)):
    return LoginUseCase(uow, hasher)


def get_register_use_case(uow=Depends(get_unit_of_work), hasher: PasswordHasher = Depends(get_password_hasher)):
    return RegisterUserUseCase(uow, hasher)


def get_update_user_use_case(uow=Depends(get_unit_of_work), hasher: PasswordHasher = Depends(get_password_hasher)):
    return UpdateUserUseCase(uow, hasher, allow_role_change=True)


def get_update_profile_use_case(uow=Depends(get_unit_of_work), hasher: PasswordHasher = Depends(get_password_hasher)):
    return UpdateUserUseCase(uow, hasher, allow_role_change=False)


def get_change_password_use_case(uow=Depends(get_unit_of_work), hasher: PasswordHasher = Depends(get_password_hasher)):
    return ChangePasswordUseCase(uow, hasher)


def get_upload_profile_image_use_case(
    uow=Depends(get_unit_of_work),
    storage: ObjectStorage = Depends(get_object_storage),
    settings: Settings = Depends(get_settings)
):
    return UploadProfileImageUseCase(
        uow,
        storage,
        bucket=settings.PROFILE_IMAGES_BUCKET,
        upload_dir=settings.UPLOAD_DIR,
        max_bytes=settings.MAX_UPLOAD_BYTES
    )
