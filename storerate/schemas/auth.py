"""Schemas for /auth endpoints and account creation."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from storerate.services.access import Role
from storerate.services.auth import check_password_policy

NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400


class _AccountFields(BaseModel):
    """Fields shared by self-registration and admin-created accounts."""

    name: str = Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    password: str
    address: str = Field(default="", max_length=ADDRESS_MAX_LENGTH)

    @field_validator("name", "address", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        problem = check_password_policy(v)
        if problem:
            raise ValueError(problem)
        return v


class RegisterRequest(_AccountFields):
    """Request body for POST /auth/register (always creates a normal user)."""


class CreateUserRequest(_AccountFields):
    """Request body for POST /admin/users."""

    role: Role


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    email: EmailStr
    password: str = Field(min_length=1)


class UpdatePasswordRequest(BaseModel):
    """Request body for PUT /auth/update-password."""

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        problem = check_password_policy(v)
        if problem:
            raise ValueError(problem)
        return v


class UserOut(BaseModel):
    """Public view of an account (never includes the password hash)."""

    id: int
    name: str
    email: str
    address: str
    role: Role
    created_at: datetime | None = Field(alias="createdAt", default=None)
    updated_at: datetime | None = Field(alias="updatedAt", default=None)

    model_config = {"populate_by_name": True, "from_attributes": True}


class UserDetail(UserOut):
    """Admin view of an account; store owners carry their store's rating."""

    store_id: int | None = Field(alias="storeId", default=None)
    store_name: str | None = Field(alias="storeName", default=None)
    average_rating: float | None = Field(alias="averageRating", default=None)


class Principal(BaseModel):
    """The authenticated caller."""

    id: int
    name: str
    email: str
    role: Role


class LoginResponse(BaseModel):
    """Response from POST /auth/login and /auth/register."""

    message: str
    token: str
    user: Principal


class CreatedUserResponse(BaseModel):
    """Response from POST /admin/users."""

    message: str
    user_id: int = Field(alias="userId")

    model_config = {"populate_by_name": True}
