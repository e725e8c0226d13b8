from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class UserPreferenceProfile(BaseModel):
    cuisines: set[str] = Field(default_factory=set)
    price_tier: int = Field(default=2, ge=1, le=4, description="1=$ ... 4=$$$$")
    dietary_restrictions: set[str] = Field(default_factory=set)
    max_wait_minutes: int | None = Field(default=None, ge=0)


class VenueCatalogEntry(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    cuisines: list[str] = Field(default_factory=list)
    price_tier: int = Field(..., ge=1, le=4)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    is_open: bool = False


class RecommendationCandidate(BaseModel):
    venue: VenueCatalogEntry
    score: float
    current_wait: int | None = None
    reasons: list[str] = Field(default_factory=list)


class RecommendationRequest(BaseModel):
    profile: UserPreferenceProfile = Field(default_factory=UserPreferenceProfile)
    catalog: list[VenueCatalogEntry] = Field(default_factory=list)
    limit: int = Field(default=10, ge=1, le=50)


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationCandidate]
    total_candidates: int


class SortOption(str, Enum):
    rating = "rating"
    review_count = "review_count"
    wait_time = "wait_time"
    price_level = "price_level"
    alphabetical = "alphabetical"


class VenueFilter(BaseModel):
    cuisines: list[str] = Field(default_factory=list)
    price_tiers: list[int] = Field(default_factory=list)
    open_only: bool = False
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    max_wait_minutes: int | None = Field(default=None, ge=0)


class BrowseRequest(BaseModel):
    catalog: list[VenueCatalogEntry] = Field(default_factory=list)
    filter: VenueFilter = Field(default_factory=VenueFilter)
    sort: SortOption = SortOption.rating


class BrowseItem(BaseModel):
    venue: VenueCatalogEntry
    current_wait: int | None = None


class BrowseResponse(BaseModel):
    venues: list[BrowseItem]
    total: int
