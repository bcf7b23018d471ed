"""Review endpoints. Update/delete are limited to the review's owner."""

from fastapi import APIRouter, Depends

from reviews_api.api.deps import get_current_user, get_repository
from reviews_api.core.authorization import require_found, require_owner
from reviews_api.core.enums import PersistenceErrorKind
from reviews_api.core.exceptions import ConflictException
from reviews_api.db.repository import PersistenceError, Repository
from reviews_api.schemas.auth import AuthenticatedUser
from reviews_api.schemas.common import MessageResponse
from reviews_api.schemas.review import CommentCreate, CommentRead, ReviewRead, ReviewUpdate

router = APIRouter()


@router.get("/me", response_model=list[ReviewRead])
async def list_my_reviews(
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    """The caller's reviews, newest first, with the reviewed item."""
    return await repo.list_reviews_for_user(user.id)


@router.get("/{review_id}", response_model=ReviewRead)
async def get_review(review_id: str, repo: Repository = Depends(get_repository)):
    return require_found(await repo.get_review(review_id), "Review")


@router.put("/{review_id}", response_model=ReviewRead)
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    review = require_owner(user, await repo.get_review(review_id), "Review", "update")
    return await repo.update_review(review, text=payload.text, rating=payload.rating)


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    review = require_owner(user, await repo.get_review(review_id), "Review", "delete")
    try:
        await repo.delete_review(review)
    except PersistenceError as e:
        if e.kind is PersistenceErrorKind.RELATED_RECORDS:
            raise ConflictException("Cannot delete review, related data exists (e.g., comments)") from e
        raise
    return MessageResponse(message="Review deleted successfully")


@router.get("/{review_id}/comments", response_model=list[CommentRead])
async def list_review_comments(review_id: str, repo: Repository = Depends(get_repository)):
    """Comments on a review, oldest first."""
    review = require_found(await repo.get_review(review_id), "Review")
    return await repo.list_comments_for_review(review.id)


@router.post("/{review_id}/comments", response_model=CommentRead, status_code=201)
async def create_review_comment(
    review_id: str,
    payload: CommentCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    review = require_found(await repo.get_review(review_id), "Review")
    return await repo.create_comment(user_id=user.id, review_id=review.id, text=payload.text)
