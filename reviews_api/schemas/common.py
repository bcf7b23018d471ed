"""Small shared schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class MessageResponse(BaseModel):
    message: str


class UserRef(BaseModel):
    """Public author info (id + username only)."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    username: str
