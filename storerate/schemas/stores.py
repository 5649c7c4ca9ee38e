"""Schemas for store listings, details and creation."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from storerate.schemas.auth import ADDRESS_MAX_LENGTH


class CreateStoreRequest(BaseModel):
    """Request body for POST /admin/stores."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    address: str = Field(default="", max_length=ADDRESS_MAX_LENGTH)
    owner_email: EmailStr = Field(alias="ownerEmail")

    model_config = {"populate_by_name": True}

    @field_validator("name", "address", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class CreatedStoreResponse(BaseModel):
    """Response from POST /admin/stores."""

    message: str
    store_id: int = Field(alias="storeId")

    model_config = {"populate_by_name": True}


class StoreSummary(BaseModel):
    """A store row with its rating aggregates.

    `averageRating` is null when the store has no ratings yet.
    `userRating` is the caller's own rating, when listed for a normal user.
    """

    id: int
    name: str
    email: str
    address: str
    average_rating: float | None = Field(alias="averageRating", default=None)
    total_ratings: int = Field(alias="totalRatings", ge=0, default=0)
    created_at: datetime | None = Field(alias="createdAt", default=None)
    user_rating: int | None = Field(alias="userRating", default=None)

    model_config = {"populate_by_name": True}


class AdminStoreRow(StoreSummary):
    """Store row for the admin listing, with owner contact."""

    owner_name: str | None = Field(alias="ownerName", default=None)
    owner_email: str | None = Field(alias="ownerEmail", default=None)


class StoreDetail(AdminStoreRow):
    """Single store with owner reference."""

    owner_id: int | None = Field(alias="ownerId", default=None)


class OwnerDashboard(BaseModel):
    """Response for GET /store/dashboard."""

    id: int
    name: str
    email: str
    address: str
    average_rating: float | None = Field(alias="averageRating", default=None)
    total_ratings: int = Field(alias="totalRatings", ge=0)

    model_config = {"populate_by_name": True}
