"""Drop every table (including Alembic's version table)."""

import asyncio
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import text

from reviews_api.core.config import get_settings
from reviews_api.core.logging import configure_logging
from reviews_api.db.base import Base
from reviews_api.db.session import create_engine
from reviews_api.models import *  # noqa: F401, F403 - register all models


async def drop_tables():
    settings = get_settings()
    configure_logging(settings)
    print("Dropping all tables...")
    engine = create_engine(settings)
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
        await conn.run_sync(Base.metadata.drop_all)
    print("Tables dropped.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(drop_tables())
