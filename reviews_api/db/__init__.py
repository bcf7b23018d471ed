"""Database package: engine, session, base."""

from reviews_api.db.session import create_engine, create_session_maker, get_db

__all__ = ["create_engine", "create_session_maker", "get_db"]
