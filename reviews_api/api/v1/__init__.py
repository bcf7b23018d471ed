"""API router aggregation."""

from fastapi import APIRouter

from reviews_api.api.v1.endpoints import auth, comments, health, items, reviews

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(items.router, prefix="/items", tags=["items"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
