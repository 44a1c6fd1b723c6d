from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from uuid import UUID
from typing import Optional

MIN_PASSWORD_LENGTH = 6


class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please provide name, email, and password")
        return value.strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value


class LoginRequest(BaseModel):
    # Deliberately loose: any malformed email simply fails as invalid credentials
    email: str
    password: str


class AccountRead(BaseModel):
    """Public profile. Never carries the password hash."""
    id: UUID
    name: str
    email: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: AccountRead


class MeResponse(BaseModel):
    user: AccountRead
