"""Ownership policy for review and comment mutations.

Order is fixed for every call site: malformed id (400), then existence (404),
then ownership (403). Nobody but the creator may change or delete a record.
"""

from __future__ import annotations

import uuid
from typing import Protocol, TypeVar

from reviews_api.core.enums import RecordStatus
from reviews_api.core.exceptions import ForbiddenException, InvalidInputException, NotFoundException
from reviews_api.db.repository import Lookup
from reviews_api.schemas.auth import AuthenticatedUser

T = TypeVar("T")


class OwnedResource(Protocol):
    user_id: uuid.UUID


def authorize(identity: AuthenticatedUser, resource: OwnedResource) -> bool:
    """Owner check by identifier only."""
    return identity.id == resource.user_id


def require_found(lookup: Lookup[T], noun: str) -> T:
    """Unwrap a lookup or raise 400 / 404 (``noun`` is e.g. "Review")."""
    if lookup.status is RecordStatus.INVALID_ID:
        raise InvalidInputException(f"Invalid {noun.lower()} ID format")
    if lookup.status is RecordStatus.NOT_FOUND or lookup.record is None:
        raise NotFoundException(f"{noun} not found")
    return lookup.record


def require_owner(identity: AuthenticatedUser, lookup: Lookup[T], noun: str, action: str) -> T:
    resource = require_found(lookup, noun)
    if not authorize(identity, resource):
        raise ForbiddenException(f"Forbidden: You are not authorized to {action} this {noun.lower()}")
    return resource
