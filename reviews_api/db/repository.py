"""Persistence abstraction over the four record types.

Route code talks to a ``Repository``; the SQL implementation translates driver
errors into ``PersistenceError`` kinds and validates raw identifiers before
querying, so malformed ids never reach the database.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Generic, NoReturn, Protocol, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reviews_api.core.enums import PersistenceErrorKind, RecordStatus
from reviews_api.models.item import Item
from reviews_api.models.review import Comment, Review
from reviews_api.models.user import User
from reviews_api.schemas.auth import AuthenticatedUser

T = TypeVar("T")

# PostgreSQL SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"
_RESTRICT_VIOLATION = "23001"


class PersistenceError(Exception):
    def __init__(self, kind: PersistenceErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Result of fetching a record by a raw (client supplied) id."""

    status: RecordStatus
    record: T | None = None

    @classmethod
    def found(cls, record: T) -> "Lookup[T]":
        return cls(RecordStatus.FOUND, record)

    @classmethod
    def not_found(cls) -> "Lookup[T]":
        return cls(RecordStatus.NOT_FOUND)

    @classmethod
    def invalid_id(cls) -> "Lookup[T]":
        return cls(RecordStatus.INVALID_ID)

    @classmethod
    def of(cls, record: T | None) -> "Lookup[T]":
        return cls.found(record) if record is not None else cls.not_found()


def parse_record_id(raw: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except ValueError:
        return None


class Repository(Protocol):
    # Users
    async def get_user_identity(self, user_id: uuid.UUID) -> AuthenticatedUser | None: ...
    async def get_user_by_username(self, username: str) -> User | None: ...
    async def create_user(self, *, username: str, password_hash: str, email: str | None) -> User: ...
    async def delete_user(self, user_id: uuid.UUID) -> bool: ...

    # Items
    async def list_items(self) -> list[Item]: ...
    async def get_item(self, raw_id: str) -> Lookup[Item]: ...
    async def create_item(self, *, name: str, description: str | None, category: str | None) -> Item: ...

    # Reviews
    async def list_reviews_for_item(self, item_id: uuid.UUID) -> list[Review]: ...
    async def list_reviews_for_user(self, user_id: uuid.UUID) -> list[Review]: ...
    async def get_review(self, raw_id: str) -> Lookup[Review]: ...
    async def create_review(self, *, user_id: uuid.UUID, item_id: uuid.UUID, text: str, rating: int) -> Review: ...
    async def update_review(self, review: Review, *, text: str | None = None, rating: int | None = None) -> Review: ...
    async def delete_review(self, review: Review) -> None: ...

    # Comments
    async def list_comments_for_review(self, review_id: uuid.UUID) -> list[Comment]: ...
    async def list_comments_for_user(self, user_id: uuid.UUID) -> list[Comment]: ...
    async def get_comment(self, raw_id: str) -> Lookup[Comment]: ...
    async def create_comment(self, *, user_id: uuid.UUID, review_id: uuid.UUID, text: str) -> Comment: ...
    async def update_comment(self, comment: Comment, *, text: str) -> Comment: ...
    async def delete_comment(self, comment: Comment) -> None: ...


# SQLite extended result codes (local and test databases)
_SQLITE_KINDS = {
    "SQLITE_CONSTRAINT_UNIQUE": PersistenceErrorKind.DUPLICATE,
    "SQLITE_CONSTRAINT_PRIMARYKEY": PersistenceErrorKind.DUPLICATE,
    "SQLITE_CONSTRAINT_FOREIGNKEY": PersistenceErrorKind.RELATED_RECORDS,
}


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and orig is not None:
        code = getattr(orig.__cause__, "sqlstate", None)
    return code


def _error_kind(exc: IntegrityError) -> PersistenceErrorKind | None:
    code = _sqlstate(exc)
    if code == _UNIQUE_VIOLATION:
        return PersistenceErrorKind.DUPLICATE
    if code in (_FOREIGN_KEY_VIOLATION, _RESTRICT_VIOLATION):
        return PersistenceErrorKind.RELATED_RECORDS
    return _SQLITE_KINDS.get(getattr(exc.orig, "sqlite_errorname", None))


def _raise_translated(exc: IntegrityError) -> NoReturn:
    kind = _error_kind(exc)
    if kind is None:
        raise exc
    raise PersistenceError(kind) from exc


def _review_query():
    return select(Review).options(selectinload(Review.user), selectinload(Review.item))


def _comment_query():
    return select(Comment).options(
        selectinload(Comment.user),
        selectinload(Comment.review).selectinload(Review.item),
    )


class SqlRepository:
    """``Repository`` backed by one AsyncSession (one per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            _raise_translated(e)

    # Users

    async def get_user_identity(self, user_id: uuid.UUID) -> AuthenticatedUser | None:
        result = await self.db.execute(
            select(User.id, User.username, User.email, User.created_at, User.updated_at).where(
                User.id == user_id
            )
        )
        row = result.one_or_none()
        if row is None:
            return None
        return AuthenticatedUser.model_validate(row)

    async def get_user_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, *, username: str, password_hash: str, email: str | None) -> User:
        user = User(username=username, password_hash=password_hash, email=email)
        self.db.add(user)
        await self._flush()
        return user

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        # Comments restrict review deletion, so clear the ones on this user's reviews first.
        owned_reviews = select(Review.id).where(Review.user_id == user_id)
        try:
            await self.db.execute(delete(Comment).where(Comment.review_id.in_(owned_reviews)))
            result = await self.db.execute(delete(User).where(User.id == user_id))
        except IntegrityError as e:
            _raise_translated(e)
        return bool(result.rowcount)

    # Items

    async def list_items(self) -> list[Item]:
        result = await self.db.execute(select(Item).order_by(Item.name))
        return list(result.scalars().all())

    async def get_item(self, raw_id: str) -> Lookup[Item]:
        item_id = parse_record_id(raw_id)
        if item_id is None:
            return Lookup.invalid_id()
        result = await self.db.execute(select(Item).where(Item.id == item_id))
        return Lookup.of(result.scalar_one_or_none())

    async def create_item(self, *, name: str, description: str | None, category: str | None) -> Item:
        item = Item(name=name, description=description, category=category)
        self.db.add(item)
        await self._flush()
        return item

    # Reviews

    async def list_reviews_for_item(self, item_id: uuid.UUID) -> list[Review]:
        result = await self.db.execute(
            _review_query().where(Review.item_id == item_id).order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_reviews_for_user(self, user_id: uuid.UUID) -> list[Review]:
        result = await self.db.execute(
            _review_query().where(Review.user_id == user_id).order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_review(self, raw_id: str) -> Lookup[Review]:
        review_id = parse_record_id(raw_id)
        if review_id is None:
            return Lookup.invalid_id()
        result = await self.db.execute(_review_query().where(Review.id == review_id))
        return Lookup.of(result.scalar_one_or_none())

    async def _reload_review(self, review_id: uuid.UUID) -> Review:
        result = await self.db.execute(
            _review_query().where(Review.id == review_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create_review(self, *, user_id: uuid.UUID, item_id: uuid.UUID, text: str, rating: int) -> Review:
        review = Review(user_id=user_id, item_id=item_id, text=text, rating=rating)
        self.db.add(review)
        await self._flush()
        return await self._reload_review(review.id)

    async def update_review(self, review: Review, *, text: str | None = None, rating: int | None = None) -> Review:
        if text is not None:
            review.text = text
        if rating is not None:
            review.rating = rating
        await self._flush()
        return await self._reload_review(review.id)

    async def delete_review(self, review: Review) -> None:
        await self.db.delete(review)
        await self._flush()

    # Comments

    async def list_comments_for_review(self, review_id: uuid.UUID) -> list[Comment]:
        result = await self.db.execute(
            _comment_query().where(Comment.review_id == review_id).order_by(Comment.created_at)
        )
        return list(result.scalars().all())

    async def list_comments_for_user(self, user_id: uuid.UUID) -> list[Comment]:
        result = await self.db.execute(
            _comment_query().where(Comment.user_id == user_id).order_by(Comment.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_comment(self, raw_id: str) -> Lookup[Comment]:
        comment_id = parse_record_id(raw_id)
        if comment_id is None:
            return Lookup.invalid_id()
        result = await self.db.execute(_comment_query().where(Comment.id == comment_id))
        return Lookup.of(result.scalar_one_or_none())

    async def _reload_comment(self, comment_id: uuid.UUID) -> Comment:
        result = await self.db.execute(
            _comment_query().where(Comment.id == comment_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create_comment(self, *, user_id: uuid.UUID, review_id: uuid.UUID, text: str) -> Comment:
        comment = Comment(user_id=user_id, review_id=review_id, text=text)
        self.db.add(comment)
        await self._flush()
        return await self._reload_comment(comment.id)

    async def update_comment(self, comment: Comment, *, text: str) -> Comment:
        comment.text = text
        await self._flush()
        return await self._reload_comment(comment.id)

    async def delete_comment(self, comment: Comment) -> None:
        await self.db.delete(comment)
        await self._flush()
