"""Shared fixtures: an in-memory repository and an app wired to it."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from reviews_api.api.deps import get_repository
from reviews_api.core.config import Settings
from reviews_api.core.enums import PersistenceErrorKind
from reviews_api.db.base import Base
from reviews_api.db.repository import Lookup, PersistenceError, parse_record_id
from reviews_api.main import create_application
from reviews_api.models import Comment, Item, Review, User
from reviews_api.schemas.auth import AuthenticatedUser

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class InMemoryRepository:
    """Repository over dicts of transient ORM objects (same shapes the SQL layer returns)."""

    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}
        self.items: dict[uuid.UUID, Item] = {}
        self.reviews: dict[uuid.UUID, Review] = {}
        self.comments: dict[uuid.UUID, Comment] = {}
        self.identity_lookups = 0
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        # Strictly increasing so "newest first" ordering is deterministic.
        self._clock += timedelta(seconds=1)
        return self._clock

    def _lookup(self, table: dict, raw_id) -> Lookup:
        record_id = parse_record_id(raw_id)
        if record_id is None:
            return Lookup.invalid_id()
        return Lookup.of(table.get(record_id))

    # Users

    async def get_user_identity(self, user_id):
        self.identity_lookups += 1
        user = self.users.get(user_id)
        return AuthenticatedUser.model_validate(user) if user is not None else None

    async def get_user_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    async def create_user(self, *, username, password_hash, email):
        if await self.get_user_by_username(username) is not None:
            raise PersistenceError(PersistenceErrorKind.DUPLICATE)
        return self.add_user(username=username, password_hash=password_hash, email=email)

    def add_user(self, *, username, password_hash, email=None):
        now = self._now()
        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            email=email,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def delete_user(self, user_id):
        if self.users.pop(user_id, None) is None:
            return False
        owned = {r.id for r in self.reviews.values() if r.user_id == user_id}
        self.comments = {
            k: c for k, c in self.comments.items() if c.user_id != user_id and c.review_id not in owned
        }
        self.reviews = {k: r for k, r in self.reviews.items() if r.user_id != user_id}
        return True

    # Items

    async def list_items(self):
        return sorted(self.items.values(), key=lambda i: i.name)

    async def get_item(self, raw_id):
        return self._lookup(self.items, raw_id)

    async def create_item(self, *, name, description=None, category=None):
        return self.add_item(name=name, description=description, category=category)

    def add_item(self, *, name, description=None, category=None):
        now = self._now()
        item = Item(
            id=uuid.uuid4(), name=name, description=description, category=category, created_at=now, updated_at=now
        )
        self.items[item.id] = item
        return item

    # Reviews

    async def list_reviews_for_item(self, item_id):
        rows = [r for r in self.reviews.values() if r.item_id == item_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def list_reviews_for_user(self, user_id):
        rows = [r for r in self.reviews.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def get_review(self, raw_id):
        return self._lookup(self.reviews, raw_id)

    async def create_review(self, *, user_id, item_id, text, rating):
        now = self._now()
        review = Review(
            id=uuid.uuid4(),
            text=text,
            rating=rating,
            user_id=user_id,
            item_id=item_id,
            created_at=now,
            updated_at=now,
        )
        review.user = self.users[user_id]
        review.item = self.items[item_id]
        self.reviews[review.id] = review
        return review

    async def update_review(self, review, *, text=None, rating=None):
        if text is not None:
            review.text = text
        if rating is not None:
            review.rating = rating
        review.updated_at = self._now()
        return review

    async def delete_review(self, review):
        if any(c.review_id == review.id for c in self.comments.values()):
            raise PersistenceError(PersistenceErrorKind.RELATED_RECORDS)
        self.reviews.pop(review.id, None)

    # Comments

    async def list_comments_for_review(self, review_id):
        rows = [c for c in self.comments.values() if c.review_id == review_id]
        return sorted(rows, key=lambda c: c.created_at)

    async def list_comments_for_user(self, user_id):
        rows = [c for c in self.comments.values() if c.user_id == user_id]
        return sorted(rows, key=lambda c: c.created_at, reverse=True)

    async def get_comment(self, raw_id):
        return self._lookup(self.comments, raw_id)

    async def create_comment(self, *, user_id, review_id, text):
        now = self._now()
        comment = Comment(
            id=uuid.uuid4(),
            text=text,
            user_id=user_id,
            review_id=review_id,
            created_at=now,
            updated_at=now,
        )
        comment.user = self.users[user_id]
        comment.review = self.reviews[review_id]
        self.comments[comment.id] = comment
        return comment

    async def update_comment(self, comment, *, text):
        comment.text = text
        comment.updated_at = self._now()
        return comment

    async def delete_comment(self, comment):
        self.comments.pop(comment.id, None)


MEMORY_DB_URL = "sqlite+aiosqlite://"


def make_sqlite_engine(url: str = MEMORY_DB_URL) -> AsyncEngine:
    """Async SQLite engine with foreign keys enforced, standing in for PostgreSQL."""
    kwargs = {"poolclass": StaticPool} if url == MEMORY_DB_URL else {}
    engine = create_async_engine(url, **kwargs)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def make_settings(**overrides) -> Settings:
    values = {"jwt_secret": TEST_SECRET, "jwt_expires_minutes": 60, "password_hash_rounds": 10}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def app(settings, repo):
    application = create_application(settings)
    application.dependency_overrides[get_repository] = lambda: repo
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return its bearer headers."""

    def _register(username: str, password: str = "pw123", email: str | None = None) -> dict[str, str]:
        body = {"username": username, "password": password}
        if email is not None:
            body["email"] = email
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _register


@pytest.fixture
def item(repo):
    return repo.add_item(name="The Cozy Cafe", description="Coffee", category="restaurant")
