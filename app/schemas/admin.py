import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import AdminRole
from app.schemas.base import ApiModel

STRONG_PASSWORD = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])")


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _check_strength(value: str) -> str:
    if not STRONG_PASSWORD.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one digit, and one special character"
        )
    return value


# ---------------- REQUEST SCHEMAS ----------------
class AdminLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)


class AdminCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8)
    role: AdminRole = AdminRole.ADMIN

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return _normalize_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def check_strength(cls, value):
        return _check_strength(value)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)

    @field_validator("new_password")
    @classmethod
    def check_strength(cls, value):
        return _check_strength(value)


class AdminStatusUpdate(BaseModel):
    is_active: bool


# ---------------- RESPONSE SCHEMAS ----------------
class AdminOut(ApiModel):
    id: str
    name: str
    email: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminSummary(ApiModel):
    id: str
    name: str
    email: str
