"""Pydantic request/response schemas for the Reviews API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReviewImageInput(BaseModel):
    url: str = Field(..., max_length=500)
    public_id: str | None = Field(None, max_length=255)


class SubmitReviewRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "order_id": "order-001",
                    "rating": 5,
                    "title": "Great mouse",
                    "comment": "Comfortable and the battery lasts for weeks.",
                }
            ]
        }
    }

    product_id: str
    order_id: str
    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(None, max_length=100)
    comment: str = Field(..., max_length=1000)
    images: list[ReviewImageInput] = Field(default_factory=list, max_length=5)


class EditReviewRequest(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    title: str | None = Field(None, max_length=100)
    comment: str | None = Field(None, max_length=1000)


class ModerateReviewRequest(BaseModel):
    status: str
    admin_note: str | None = Field(None, max_length=500)


class VoteRequest(BaseModel):
    vote_type: str


class ReviewIdResponse(BaseModel):
    review_id: str


class RatingResponse(BaseModel):
    product_id: str
    average_rating: float
    review_count: int


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    user_id: str
    order_id: str
    rating: int
    title: str | None = None
    comment: str
    images: list[ReviewImageInput] = []
    verified_purchase: bool
    status: str
    helpful_count: int
    not_helpful_count: int
    is_edited: bool


class StatusResponse(BaseModel):
    status: str = "ok"
