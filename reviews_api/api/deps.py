"""Request dependencies: settings, repository, credential services and the identity gate."""

from __future__ import annotations

import logging

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reviews_api.core.config import Settings
from reviews_api.core.enums import AuthFailure, TokenErrorKind
from reviews_api.core.exceptions import UnauthorizedException
from reviews_api.core.security import PasswordHasher, TokenService, TokenVerificationError
from reviews_api.db.repository import Repository, SqlRepository
from reviews_api.db.session import get_db
from reviews_api.schemas.auth import AuthenticatedUser

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_repository(db: AsyncSession = Depends(get_db)) -> Repository:
    return SqlRepository(db)


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer"):
        raise UnauthorizedException(
            "Not authorized, no token provided or invalid format", AuthFailure.MISSING_HEADER
        )
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer":
        # e.g. "BearerXYZ": right prefix, wrong scheme
        raise UnauthorizedException(
            "Not authorized, no token provided or invalid format", AuthFailure.MISSING_HEADER
        )
    token = token.strip()
    if not token:
        raise UnauthorizedException("Not authorized, invalid token format in header", AuthFailure.EMPTY_TOKEN)
    return token


async def get_current_user(
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
    repo: Repository = Depends(get_repository),
) -> AuthenticatedUser:
    """Resolve the caller of a protected route or reject the request with 401.

    Every request re-reads the user, so a deleted account is refused even while
    its token is still valid. A missing secret surfaces as ConfigurationError (500).
    """
    token = _bearer_token(authorization)

    try:
        claim = tokens.verify(token)
    except TokenVerificationError as e:
        if e.kind is TokenErrorKind.EXPIRED:
            raise UnauthorizedException("Not authorized, token expired", AuthFailure.TOKEN_EXPIRED) from e
        logger.info("Token refused (%s)", e.kind.value)
        raise UnauthorizedException(
            f"Not authorized, token error: {e.reason}", AuthFailure.TOKEN_INVALID
        ) from e

    user = await repo.get_user_identity(claim.user_id)
    if user is None:
        raise UnauthorizedException("Not authorized, user not found", AuthFailure.USER_NOT_FOUND)
    return user
