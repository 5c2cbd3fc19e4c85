"""
Example 04: Async Support

This example demonstrates the async API over aiosqlite.
Requires: pip install row-persist[sqlite-async]
"""

import asyncio
from row_persist import AsyncDatabase, AsyncRepository, AsyncTransaction, Tag
from dataclasses import dataclass
from typing import Annotated

import aiosqlite


@dataclass
class User:
    id: Annotated[int, Tag("id,pk")] = 0
    name: str = ""
    email: str = ""


async def main():
    async with aiosqlite.connect(":memory:") as conn:
        await conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT)")

        print("=== Async Support ===\n")

        db = AsyncDatabase()
        async with AsyncTransaction(conn) as tx:
            for name in ("Alice", "Bob", "Charlie"):
                await db.insert(tx, "users", User(name=name, email=f"{name.lower()}@example.com"))

        repo = AsyncRepository(conn, "users", User, db)
        user = await repo.get(2)
        print(f"get(2): {user}")

        users = await repo.find("SELECT * FROM users WHERE name <> ?", "Bob")
        print(f"find ({len(users)} rows):")
        for u in users:
            print(f"  - {u.name} ({u.email})")


if __name__ == "__main__":
    asyncio.run(main())
