"""Review models."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import Field, field_validator

from vendorsync.ingestion.normalize import safe_float, safe_str
from vendorsync.models._base import VendorBaseModel


class ReviewAuthor(VendorBaseModel):
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class Review(VendorBaseModel):
    """A customer review of the vendor's place."""

    user_id: str | None = None
    place_id: str | None = None
    review: str | None = None
    rating: float | None = None
    user: ReviewAuthor | None = None

    @field_validator("user_id", "place_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: object) -> str | None:
        return safe_str(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: object) -> float | None:
        return safe_float(value)


class ReviewSummary(VendorBaseModel):
    average: float = 0
    count: int = 0

    @classmethod
    def from_reviews(cls, reviews: Iterable[Review]) -> ReviewSummary:
        """``average = sum(ratings) / count``; unrated reviews add 0."""
        items = list(reviews)
        count = len(items)
        if count == 0:
            return cls(average=0, count=0)
        total = sum(review.rating or 0 for review in items)
        return cls(average=total / count, count=count)


class ReviewsSnapshot(VendorBaseModel):
    reviews: list[Review] = Field(default_factory=list)
    summary: ReviewSummary = Field(default_factory=ReviewSummary)

    @classmethod
    def from_reviews(cls, reviews: Iterable[Review]) -> ReviewsSnapshot:
        items = list(reviews)
        return cls(reviews=items, summary=ReviewSummary.from_reviews(items))
