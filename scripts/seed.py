"""Reset the database to a small demo dataset (users alice/bob, three items, reviews, comments)."""

import asyncio
import os
import sys

# Add parent directory to path so we can import app modules
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import delete

from reviews_api.core.config import get_settings
from reviews_api.core.logging import configure_logging
from reviews_api.core.security import build_password_hasher
from reviews_api.db.repository import SqlRepository
from reviews_api.db.session import create_engine, create_session_maker
from reviews_api.models import Comment, Item, Review, User

DEMO_PASSWORD = "password123"


async def main():
    settings = get_settings()
    configure_logging(settings)
    engine = create_engine(settings)
    session_maker = create_session_maker(engine)
    hasher = build_password_hasher(settings)

    print("Start seeding ...")
    async with session_maker() as session:
        # Children first: comments restrict review deletion.
        for model, name in ((Comment, "comment"), (Review, "review"), (User, "user"), (Item, "item")):
            await session.execute(delete(model))
            print(f"Deleted records in {name} table")

        repo = SqlRepository(session)
        password_hash = hasher.hash(DEMO_PASSWORD)
        alice = await repo.create_user(username="alice", email="alice@example.com", password_hash=password_hash)
        bob = await repo.create_user(username="bob", email="bob@example.com", password_hash=password_hash)
        print(f"Created users: {alice.id}, {bob.id}")

        cafe = await repo.create_item(
            name="The Cozy Cafe",
            description="A warm place for coffee and pastries.",
            category="restaurant",
        )
        gadget = await repo.create_item(
            name="Modern Tech Gadget",
            description="The latest and greatest gadget you never knew you needed.",
            category="product",
        )
        library = await repo.create_item(
            name="Silent Library", description="A quiet place to read and study.", category="place"
        )
        print(f"Created items: {cafe.id}, {gadget.id}, {library.id}")

        r1 = await repo.create_review(
            user_id=alice.id, item_id=cafe.id, text="Great atmosphere and delicious croissants!", rating=5
        )
        r2 = await repo.create_review(
            user_id=bob.id, item_id=cafe.id, text="Coffee was a bit cold, but the staff was friendly.", rating=3
        )
        r3 = await repo.create_review(
            user_id=alice.id, item_id=gadget.id, text="Works as advertised, very sleek design.", rating=4
        )
        print(f"Created reviews: {r1.id}, {r2.id}, {r3.id}")

        c1 = await repo.create_comment(user_id=bob.id, review_id=r1.id, text="I agree, the croissants are the best!")
        c2 = await repo.create_comment(
            user_id=alice.id, review_id=r2.id, text="Maybe give the espresso a try next time?"
        )
        print(f"Created comments: {c1.id}, {c2.id}")

        await session.commit()

    await engine.dispose()
    print("Seeding finished.")


if __name__ == "__main__":
    asyncio.run(main())
