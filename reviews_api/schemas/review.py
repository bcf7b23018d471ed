"""Review and Comment schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from reviews_api.core.constants import MAX_RATING, MIN_RATING
from reviews_api.schemas.common import UserRef
from reviews_api.schemas.item import ItemRef

RATING_MESSAGE = f"Rating must be a number between {MIN_RATING} and {MAX_RATING}"


def _coerce_rating(value: Any) -> int | None:
    """Accept ints and integer strings ("4"); anything else or out of range is rejected."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(RATING_MESSAGE)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValueError(RATING_MESSAGE) from None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(RATING_MESSAGE)
    return value


class ReviewCreate(BaseModel):
    text: str | None = None
    rating: Any = None

    @model_validator(mode="after")
    def _check(self):
        if self.text is None or not self.text.strip():
            raise ValueError("Review text cannot be empty")
        if self.rating is None:
            raise ValueError(RATING_MESSAGE)
        self.rating = _coerce_rating(self.rating)
        return self


class ReviewUpdate(BaseModel):
    text: str | None = None
    rating: Any = None

    @model_validator(mode="after")
    def _check(self):
        if self.text is None and self.rating is None:
            raise ValueError("Review text or rating must be provided for update")
        if self.text is not None and not self.text.strip():
            raise ValueError("Review text cannot be empty")
        self.rating = _coerce_rating(self.rating)
        return self


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    text: str
    rating: int
    user_id: UUID
    item_id: UUID
    created_at: datetime
    updated_at: datetime
    user: UserRef | None = None
    item: ItemRef | None = None


class ReviewRef(BaseModel):
    """Review summary embedded in comment responses."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    text: str
    item_id: UUID
    item: ItemRef | None = None


class CommentText(BaseModel):
    text: str | None = None

    @field_validator("text")
    @classmethod
    def _not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Comment text cannot be empty")
        return v

    @model_validator(mode="after")
    def _required(self):
        if self.text is None:
            raise ValueError("Comment text cannot be empty")
        return self


class CommentCreate(CommentText):
    pass


class CommentUpdate(CommentText):
    pass


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    text: str
    user_id: UUID
    review_id: UUID
    created_at: datetime
    updated_at: datetime
    user: UserRef | None = None
    review: ReviewRef | None = None
