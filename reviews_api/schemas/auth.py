"""Auth schemas: credentials in, token and identity out."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Credentials(BaseModel):
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _require_username_and_password(self):
        if not self.username or not self.password:
            raise ValueError("Username and password required.")
        return self


class RegisterRequest(Credentials):
    email: str | None = Field(None, max_length=255)


class LoginRequest(Credentials):
    pass


class TokenResponse(BaseModel):
    token: str
    message: str


class AuthenticatedUser(BaseModel):
    """Per-request identity: a User without its password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str | None = None
    created_at: datetime
    updated_at: datetime
