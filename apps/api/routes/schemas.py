from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    message: str


class ServiceResponse(BaseModel):
    name: str
    price: float
    image: str | None = None
    image_url: str | None = None


class GarageResponse(BaseModel):
    id: str
    zone: str
    name: str
    location: str
    main_image: str | None = None
    main_image_url: str | None = None
    gallery_images: list[str] = Field(default_factory=list)
    gallery_image_urls: list[str] = Field(default_factory=list)
    services: list[ServiceResponse] = Field(default_factory=list)
    created_at: datetime


class ZoneResponse(BaseModel):
    id: str
    zone_name: str
    zone_image: str
    zone_image_url: str
    uploaded_by: str
    created_at: datetime


class PaymentResponse(BaseModel):
    id: str
    name: str
    email: str
    car_model: str
    garage: str
    garage_id: str
    service: str
    price: float
    transaction_id: str
    qr_code_image: str
    qr_code_image_url: str
    status: str
    created_at: datetime
    updated_at: datetime


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    type: str
    created_at: datetime


class UserEnvelope(BaseModel):
    message: str
    user: UserResponse


class UserRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    type: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    otp: str | int | None = None
    new_password: str | None = Field(default=None, alias="newPassword")


class ContactRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    mobile_number: str | None = Field(default=None, alias="mobileNumber")
    message: str | None = None
    program: str | None = None


class ContactResponse(BaseModel):
    id: str
    name: str
    mobile_number: str
    message: str
    program: str | None = None
    created_at: datetime
