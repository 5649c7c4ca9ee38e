"""Pydantic schemas for API request/response validation."""

from storerate.schemas.common import ErrorDetail, ErrorResponse, MessageResponse, Paginated
from storerate.schemas.auth import (
    CreatedUserResponse,
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    Principal,
    RegisterRequest,
    UpdatePasswordRequest,
    UserDetail,
    UserOut,
)
from storerate.schemas.stores import (
    AdminStoreRow,
    CreatedStoreResponse,
    CreateStoreRequest,
    OwnerDashboard,
    StoreDetail,
    StoreSummary,
)
from storerate.schemas.ratings import (
    MyRatingRow,
    RatingRequest,
    RatingResponse,
    RecentRating,
    StoreRatingRow,
)
from storerate.schemas.stats import AdminDashboard, PlatformStats, UserStats

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "Paginated",
    "CreatedUserResponse",
    "CreateUserRequest",
    "LoginRequest",
    "LoginResponse",
    "Principal",
    "RegisterRequest",
    "UpdatePasswordRequest",
    "UserDetail",
    "UserOut",
    "AdminStoreRow",
    "CreatedStoreResponse",
    "CreateStoreRequest",
    "OwnerDashboard",
    "StoreDetail",
    "StoreSummary",
    "MyRatingRow",
    "RatingRequest",
    "RatingResponse",
    "RecentRating",
    "StoreRatingRow",
    "AdminDashboard",
    "PlatformStats",
    "UserStats",
]
