"""Item schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ItemRef(BaseModel):
    """Minimal item info for embedding in review responses (id + name only)."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str


class ItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    description: str | None = None
    category: str | None = None
    created_at: datetime
    updated_at: datetime
