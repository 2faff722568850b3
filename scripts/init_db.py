import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from category_resolver.db import create_tables


async def main():
    print("Creating cache tables...")
    await create_tables()
    print("Done.")

if __name__ == "__main__":
    asyncio.run(main())
