"""Security utilities: password hashing and bearer tokens (JWT)."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from reviews_api.core.config import Settings
from reviews_api.core.enums import TokenErrorKind
from reviews_api.core.exceptions import ConfigurationError

JWT_ALGORITHM = "HS256"


class PasswordHasher:
    """bcrypt via passlib; each hash embeds its own random salt and cost."""

    def __init__(self, rounds: int = 10):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain: str) -> str:
        return self.context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        """True on match. A mismatch or an unreadable stored hash is False, never an error."""
        if not plain or not hashed:
            return False
        try:
            return self.context.verify(plain, hashed)
        except ValueError:
            return False

    def dummy_verify(self) -> None:
        """Spend the time of a real verify (used when the username does not exist)."""
        self.context.dummy_verify()


class TokenClaim(BaseModel):
    """Decoded identity claim carried by a bearer token."""

    user_id: uuid.UUID
    username: str
    issued_at: int
    expires_at: int


class TokenVerificationError(Exception):
    def __init__(self, kind: TokenErrorKind, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(reason)


class TokenService:
    """Issues and verifies HS256 tokens with a fixed lifetime.

    The secret is required for both directions; without it the service refuses
    to work instead of producing unverifiable tokens.
    """

    def __init__(self, secret: str, expires_minutes: int = 60):
        self.secret = secret
        self.expires_minutes = expires_minutes

    def ensure_configured(self) -> str:
        """Return the secret or raise ConfigurationError."""
        if not self.secret:
            raise ConfigurationError()
        return self.secret

    def issue(self, user_id: uuid.UUID, username: str, *, now: datetime | None = None) -> str:
        secret = self.ensure_configured()
        issued = now or datetime.now(timezone.utc)
        expires = issued + timedelta(minutes=self.expires_minutes)
        payload = {
            "sub": str(user_id),
            "username": username,
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> TokenClaim:
        """Check signature and expiry.

        Raises:
            ConfigurationError: no secret configured.
            TokenVerificationError: with ``kind`` set to why the token was refused.
        """
        secret = self.ensure_configured()
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenVerificationError(TokenErrorKind.EXPIRED, str(e)) from e
        except jwt.InvalidSignatureError as e:
            raise TokenVerificationError(TokenErrorKind.BAD_SIGNATURE, str(e)) from e
        except jwt.DecodeError as e:
            raise TokenVerificationError(TokenErrorKind.MALFORMED, str(e)) from e
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(TokenErrorKind.INVALID_CLAIMS, str(e)) from e

        try:
            user_id = uuid.UUID(str(payload["sub"]))
        except ValueError as e:
            raise TokenVerificationError(TokenErrorKind.INVALID_CLAIMS, "Invalid subject") from e
        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise TokenVerificationError(TokenErrorKind.INVALID_CLAIMS, "Missing username claim")

        return TokenClaim(
            user_id=user_id,
            username=username,
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )


def build_password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.password_hash_rounds)


def build_token_service(settings: Settings) -> TokenService:
    return TokenService(secret=settings.jwt_secret, expires_minutes=settings.jwt_expires_minutes)
