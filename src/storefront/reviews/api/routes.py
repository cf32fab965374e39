"""FastAPI endpoints for product reviews."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.identity.api.dependencies import admin_session, current_session
from storefront.identity.tokens import SessionClaims
from storefront.reviews.api.schemas import (
    EditReviewRequest,
    ModerateReviewRequest,
    RatingResponse,
    ReviewIdResponse,
    ReviewImageInput,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
    VoteRequest,
)
from storefront.reviews.rating import RecalculateProductRating
from storefront.reviews.review.editing import EditReview
from storefront.reviews.review.moderation import ModerateReview
from storefront.reviews.review.removal import DeleteReview
from storefront.reviews.review.review import Review, ReviewStatus
from storefront.reviews.review.submission import SubmitReview, submit_review
from storefront.reviews.review.voting import VoteOnReview
from storefront.shared.queries import fetch_all

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _review_response(review) -> ReviewResponse:
    return ReviewResponse(
        id=str(review.id),
        product_id=str(review.product_id),
        user_id=str(review.user_id),
        order_id=str(review.order_id),
        rating=review.rating.score,
        title=review.title,
        comment=review.comment,
        images=[ReviewImageInput(url=i.url, public_id=i.public_id) for i in review.images],
        verified_purchase=bool(review.verified_purchase),
        status=review.status,
        helpful_count=review.helpful_count or 0,
        not_helpful_count=review.not_helpful_count or 0,
        is_edited=bool(review.is_edited),
    )


@review_router.get("", response_model=list[ReviewResponse])
async def list_reviews(product_id: str) -> list[ReviewResponse]:
    reviews = fetch_all(
        current_domain.repository_for(Review)._dao.query.filter(product_id=product_id, status=ReviewStatus.APPROVED.value)
    )
    reviews.sort(key=lambda r: r.created_at, reverse=True)
    return [_review_response(r) for r in reviews]


@review_router.get("/pending", response_model=list[ReviewResponse], dependencies=[Depends(admin_session)])
async def list_pending_reviews() -> list[ReviewResponse]:
    reviews = fetch_all(current_domain.repository_for(Review)._dao.query.filter(status=ReviewStatus.PENDING.value))
    return [_review_response(r) for r in reviews]


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def create_review(body: SubmitReviewRequest, claims: SessionClaims = Depends(current_session)) -> ReviewIdResponse:
    command = SubmitReview(
        product_id=body.product_id,
        user_id=claims.user_id,
        order_id=body.order_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=json.dumps([i.model_dump() for i in body.images]) if body.images else None,
    )
    result = submit_review(command)
    return ReviewIdResponse(review_id=result)


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(
    review_id: str, body: EditReviewRequest, claims: SessionClaims = Depends(current_session)
) -> StatusResponse:
    command = EditReview(
        review_id=review_id,
        user_id=claims.user_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.put("/{review_id}/moderation", response_model=StatusResponse)
async def moderate_review(
    review_id: str, body: ModerateReviewRequest, claims: SessionClaims = Depends(admin_session)
) -> StatusResponse:
    command = ModerateReview(
        review_id=review_id,
        status=body.status,
        moderator_id=claims.user_id,
        actor_role=claims.role,
        admin_note=body.admin_note,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/votes", status_code=201, response_model=StatusResponse)
async def vote_on_review(
    review_id: str, body: VoteRequest, claims: SessionClaims = Depends(current_session)
) -> StatusResponse:
    command = VoteOnReview(review_id=review_id, voter_id=claims.user_id, vote_type=body.vote_type)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str, claims: SessionClaims = Depends(current_session)) -> StatusResponse:
    command = DeleteReview(review_id=review_id, actor_id=claims.user_id, actor_role=claims.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post(
    "/products/{product_id}/rating", response_model=RatingResponse, dependencies=[Depends(admin_session)]
)
async def recalculate_rating(product_id: str) -> RatingResponse:
    result = current_domain.process(RecalculateProductRating(product_id=product_id), asynchronous=False)
    return RatingResponse(product_id=product_id, **result)
