"""Item browsing, plus reviews listed and posted under an item."""

from fastapi import APIRouter, Depends

from reviews_api.api.deps import get_current_user, get_repository
from reviews_api.core.authorization import require_found
from reviews_api.db.repository import Repository
from reviews_api.schemas.auth import AuthenticatedUser
from reviews_api.schemas.item import ItemRead
from reviews_api.schemas.review import ReviewCreate, ReviewRead

router = APIRouter()


@router.get("", response_model=list[ItemRead])
async def list_items(repo: Repository = Depends(get_repository)):
    """All items, alphabetical."""
    return await repo.list_items()


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: str, repo: Repository = Depends(get_repository)):
    return require_found(await repo.get_item(item_id), "Item")


@router.get("/{item_id}/reviews", response_model=list[ReviewRead])
async def list_item_reviews(item_id: str, repo: Repository = Depends(get_repository)):
    """Reviews of one item, newest first, with author."""
    item = require_found(await repo.get_item(item_id), "Item")
    return await repo.list_reviews_for_item(item.id)


@router.post("/{item_id}/reviews", response_model=ReviewRead, status_code=201)
async def create_item_review(
    item_id: str,
    payload: ReviewCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    """Post a review on an item; the caller becomes its owner."""
    item = require_found(await repo.get_item(item_id), "Item")
    return await repo.create_review(user_id=user.id, item_id=item.id, text=payload.text, rating=payload.rating)
