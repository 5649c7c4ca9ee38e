"""Schemas for dashboard statistics.

Averages are rounded to one decimal and are null when nothing was rated.
"""

from pydantic import BaseModel, Field

from storerate.schemas.ratings import RecentRating
from storerate.schemas.stores import StoreSummary


class AdminDashboard(BaseModel):
    """Response for GET /admin/dashboard."""

    total_users: int = Field(alias="totalUsers", ge=0)
    total_stores: int = Field(alias="totalStores", ge=0)
    total_ratings: int = Field(alias="totalRatings", ge=0)
    average_rating: float | None = Field(alias="averageRating", default=None)

    model_config = {"populate_by_name": True}


class UserStats(BaseModel):
    """Response for GET /user/stats."""

    total_stores: int = Field(alias="totalStores", ge=0)
    my_ratings: int = Field(alias="myRatings", ge=0)
    average_rating: float | None = Field(alias="averageRating", default=None)
    recent_ratings: list[RecentRating] = Field(alias="recentRatings", default_factory=list)

    model_config = {"populate_by_name": True}


class PlatformStats(BaseModel):
    """Response for GET /stores/stats."""

    total_stores: int = Field(alias="totalStores", ge=0)
    total_ratings: int = Field(alias="totalRatings", ge=0)
    average_rating: float | None = Field(alias="averageRating", default=None)
    top_stores: list[StoreSummary] = Field(alias="topStores", max_length=5, default_factory=list)
    recent_ratings: list[RecentRating] = Field(alias="recentRatings", max_length=10, default_factory=list)

    model_config = {"populate_by_name": True}
