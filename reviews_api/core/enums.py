"""Shared enums for the auth core and the persistence layer."""

from enum import Enum


class TokenErrorKind(str, Enum):
    """Why a bearer token failed verification."""

    MALFORMED = "malformed"  # Not a decodable JWT
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    INVALID_CLAIMS = "invalid_claims"  # Missing or unusable sub / username / exp


class AuthFailure(str, Enum):
    """Reason an authenticated request was rejected (logged, never echoed with internals)."""

    MISSING_HEADER = "missing_header"
    EMPTY_TOKEN = "empty_token"
    TOKEN_INVALID = "token_invalid"
    TOKEN_EXPIRED = "token_expired"
    USER_NOT_FOUND = "user_not_found"
    BAD_CREDENTIALS = "bad_credentials"


class RecordStatus(str, Enum):
    """Outcome of a lookup by raw identifier."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID_ID = "invalid_id"


class PersistenceErrorKind(str, Enum):
    """Write failures surfaced by the repository."""

    DUPLICATE = "duplicate"  # Unique constraint (e.g. username)
    RELATED_RECORDS = "related_records"  # Row still referenced (e.g. review with comments)
