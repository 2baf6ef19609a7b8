"""Database seeder: roles, default accounts and sample forum content."""
import argparse
import asyncio
import time

from forum.database import Base, async_session, engine
from forum.seed import seed_content, seed_roles, seed_users


async def seed(reset: bool = False, content: bool = True):
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
            print("  Dropped all tables")
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        await seed_roles(session)
        await seed_users(session)
        print("  Roles and default users ready")
        if content:
            await seed_content(session)
            print("  Categories, posts and comments ready")
        await session.commit()

    await engine.dispose()
    print(f"\nSeeding complete in {time.perf_counter() - start:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the forum database")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    parser.add_argument("--no-content", action="store_true", help="Only seed roles and default users")
    args = parser.parse_args()
    asyncio.run(seed(reset=args.reset, content=not args.no_content))


if __name__ == "__main__":
    main()
