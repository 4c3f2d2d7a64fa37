from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class OrderItemRequest(BaseModel):
    product_id: Optional[Any] = None
    id: Optional[Any] = None
    name: Optional[str] = None
    quantity: Optional[Any] = None
    price: Optional[Any] = None


class CreateOrderRequest(BaseModel):
    user_id: Optional[int] = None
    total_amount: Optional[Any] = None
    items: Optional[List[OrderItemRequest]] = None


class UpdateOrderStatusRequest(BaseModel):
    status: Optional[str] = None
    reason: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class CreateUserRequest(RegisterRequest):
    role: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profile_image: Optional[str] = None


class UpdateUserRequest(UpdateProfileRequest):
    role: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class ProductRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[Any] = None
    description: Optional[str] = None
    image_path: Optional[str] = None
    category: Optional[str] = None


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    message: Optional[str] = None
    sender: Optional[str] = None


class MarkChatReadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    sender: Optional[str] = None


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str


def success(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    """Success envelope shared by every endpoint"""
    body = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
