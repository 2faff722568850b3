import argparse
import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from category_resolver.db import AsyncSessionLocal, CacheStore


async def main():
    parser = argparse.ArgumentParser(description="Empty the resolver cache tables.")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--classes-only", action="store_true", help="Only clear the class cache.")
    group.add_argument("--categories-only", action="store_true", help="Only clear the category cache.")
    args = parser.parse_args()

    async with AsyncSessionLocal() as session:
        store = CacheStore(session)
        removed = await store.clear(
            classes=not args.categories_only,
            categories=not args.classes_only,
        )

    for table, count in removed.items():
        print(f"{table}: {count} rows deleted")

if __name__ == "__main__":
    asyncio.run(main())
