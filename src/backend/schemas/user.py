"""
User-related Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from core.config import settings
from schemas.common import MessageResponse


def _check_password_bytes(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(password.encode("utf-8")) > settings.PASSWORD_MAX_LENGTH:
        raise ValueError("Password is too long.")
    return password


class UserCreate(BaseModel):
    """Schema for user registration."""

    username: str = Field(
        ...,
        min_length=settings.USERNAME_MIN_LENGTH,
        max_length=settings.USERNAME_MAX_LENGTH,
        pattern=r"^[a-zA-Z0-9_-]+$",
    )
    email: EmailStr
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, email: str) -> str:
        if len(email) > settings.EMAIL_MAX_LENGTH:
            raise ValueError("Email is too long.")
        return email

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: str) -> str:
        return _check_password_bytes(password)


class UserAuthenticate(BaseModel):
    """Login by username or email."""

    usernameemail: str = Field(
        ...,
        min_length=1,
        max_length=max(settings.EMAIL_MAX_LENGTH, settings.USERNAME_MAX_LENGTH),
    )
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: str) -> str:
        return _check_password_bytes(password)


class PasswordUpdate(BaseModel):
    oldPassword: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)
    newPassword: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)

    @field_validator("oldPassword", "newPassword")
    @classmethod
    def validate_passwords(cls, password: str) -> str:
        return _check_password_bytes(password)


class ActivationRequest(BaseModel):
    activationid: str = Field(..., min_length=1, pattern=r"^[a-zA-Z0-9]+$")


class SessionResponse(MessageResponse):
    """A fresh session: the bearer token and its remaining lifetime in milliseconds."""

    token: str
    ttl: int


class LoginResponse(SessionResponse):
    username: str
