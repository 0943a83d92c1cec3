# selfanypay/schemas/auth_schema.py

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 chars")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Must contain uppercase")
    if not re.search(r"\d", value):
        raise ValueError("Must contain number")
    if not re.search(r"[^A-Za-z0-9]", value):
        raise ValueError("Must contain symbol")
    return value


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str
    confirm_password: str

    @field_validator("password")
    def validate_password(cls, value):
        return check_password_strength(value)

    @field_validator("confirm_password")
    def passwords_match(cls, v, info):
        if v != info.data.get("password"):
            raise ValueError("Passwords do not match.")
        return v


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    def validate_password(cls, value):
        return check_password_strength(value)

    @field_validator("confirm_password")
    def passwords_match(cls, v, info):
        if v != info.data.get("new_password"):
            raise ValueError("Passwords do not match.")
        return v


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: Optional[str] = None
    full_name: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    is_verified: bool
    user_type: str
    profile_photo_url: Optional[str] = None
    created_at: datetime


class RegisterResponse(BaseModel):
    message: str
    user: UserRead


class AuthResponse(BaseModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"
