"""Comment endpoints. Update/delete are limited to the comment's owner."""

from fastapi import APIRouter, Depends

from reviews_api.api.deps import get_current_user, get_repository
from reviews_api.core.authorization import require_owner
from reviews_api.db.repository import Repository
from reviews_api.schemas.auth import AuthenticatedUser
from reviews_api.schemas.common import MessageResponse
from reviews_api.schemas.review import CommentRead, CommentUpdate

router = APIRouter()


@router.get("/me", response_model=list[CommentRead])
async def list_my_comments(
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    """The caller's comments, newest first, with the review and its item."""
    return await repo.list_comments_for_user(user.id)


@router.put("/{comment_id}", response_model=CommentRead)
async def update_comment(
    comment_id: str,
    payload: CommentUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    comment = require_owner(user, await repo.get_comment(comment_id), "Comment", "update")
    return await repo.update_comment(comment, text=payload.text)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    comment = require_owner(user, await repo.get_comment(comment_id), "Comment", "delete")
    await repo.delete_comment(comment)
    return MessageResponse(message="Comment deleted successfully")
