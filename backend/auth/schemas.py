# backend/auth/schemas.py

from pydantic import BaseModel, EmailStr, field_validator

MIN_PASSWORD_LENGTH = 6


def _check_password_length(value: str, label: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters long")
    return value


class RegisterSchema(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password_length(v, "Password")


class LoginSchema(BaseModel):
    email: str
    password: str


class ChangePasswordSchema(BaseModel):
    currentPassword: str
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password_length(v, "New password")
