"""Registration, login and the caller's own profile."""

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from reviews_api.api.deps import get_current_user, get_password_hasher, get_repository, get_token_service
from reviews_api.core.enums import AuthFailure, PersistenceErrorKind
from reviews_api.core.exceptions import ConflictException, UnauthorizedException
from reviews_api.core.security import PasswordHasher, TokenService
from reviews_api.db.repository import PersistenceError, Repository
from reviews_api.schemas.auth import AuthenticatedUser, LoginRequest, RegisterRequest, TokenResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    repo: Repository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """Create an account and return a token for it."""
    tokens.ensure_configured()
    if await repo.get_user_by_username(payload.username) is not None:
        raise ConflictException("Username already taken")

    password_hash = await run_in_threadpool(hasher.hash, payload.password)
    try:
        user = await repo.create_user(username=payload.username, password_hash=password_hash, email=payload.email)
    except PersistenceError as e:
        # Lost a race against a concurrent registration of the same name.
        if e.kind is PersistenceErrorKind.DUPLICATE:
            raise ConflictException("Username already taken") from e
        raise

    token = tokens.issue(user.id, user.username)
    logger.info("Registered user %s", user.id)
    return TokenResponse(token=token, message="User registered successfully")


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    repo: Repository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """Exchange username + password for a token."""
    tokens.ensure_configured()
    user = await repo.get_user_by_username(payload.username)
    if user is None:
        await run_in_threadpool(hasher.dummy_verify)
        raise UnauthorizedException("Invalid credentials", AuthFailure.BAD_CREDENTIALS)
    if not await run_in_threadpool(hasher.verify, payload.password, user.password_hash):
        raise UnauthorizedException("Invalid credentials", AuthFailure.BAD_CREDENTIALS)

    token = tokens.issue(user.id, user.username)
    return TokenResponse(token=token, message="Login successful")


@router.get("/me", response_model=AuthenticatedUser)
async def me(user: AuthenticatedUser = Depends(get_current_user)):
    return user
