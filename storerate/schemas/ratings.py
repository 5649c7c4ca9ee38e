"""Schemas for rating submission and rating listings."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from storerate.models.rating import MAX_RATING, MIN_RATING, is_valid_rating_value

RATING_RANGE_MESSAGE = f"Rating must be between {MIN_RATING} and {MAX_RATING}"


class RatingRequest(BaseModel):
    """Request body for POST/PUT /user/stores/{storeId}/rating.

    4 is accepted; "4", 4.0, 2.5 and true are not.
    """

    rating: Any = Field(
        description="Integer from 1 to 5",
        json_schema_extra={"type": "integer", "minimum": MIN_RATING, "maximum": MAX_RATING},
    )

    @field_validator("rating")
    @classmethod
    def _rating_range(cls, v: Any) -> int:
        if not is_valid_rating_value(v):
            raise ValueError(RATING_RANGE_MESSAGE)
        return v


class RatingResponse(BaseModel):
    """Acknowledgement with the stored rating."""

    message: str
    rating: int
    store_id: int = Field(alias="storeId")
    updated_at: datetime | None = Field(alias="updatedAt", default=None)

    model_config = {"populate_by_name": True}


class StoreRatingRow(BaseModel):
    """A rating on a store, as seen by the public catalogue or the owner."""

    id: int
    rating: int
    created_at: datetime | None = Field(alias="createdAt", default=None)
    user_name: str = Field(alias="userName")
    user_email: str | None = Field(alias="userEmail", default=None)

    model_config = {"populate_by_name": True}


class MyRatingRow(BaseModel):
    """A rating the caller has given."""

    id: int
    rating: int
    created_at: datetime | None = Field(alias="createdAt", default=None)
    updated_at: datetime | None = Field(alias="updatedAt", default=None)
    store_id: int = Field(alias="storeId")
    store_name: str = Field(alias="storeName")
    store_address: str = Field(alias="storeAddress")

    model_config = {"populate_by_name": True}


class RecentRating(BaseModel):
    """Compact rating row for dashboards."""

    id: int
    rating: int
    created_at: datetime | None = Field(alias="createdAt", default=None)
    store_name: str = Field(alias="storeName")
    store_address: str | None = Field(alias="storeAddress", default=None)
    user_name: str | None = Field(alias="userName", default=None)

    model_config = {"populate_by_name": True}
