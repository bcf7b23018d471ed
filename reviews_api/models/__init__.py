"""ORM models - import all so Base.metadata is complete for migrations."""

from reviews_api.models.item import Item
from reviews_api.models.review import Comment, Review
from reviews_api.models.user import User

__all__ = [
    "Comment",
    "Item",
    "Review",
    "User",
]
