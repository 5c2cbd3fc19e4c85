"""
Example 05: Repository Pattern

This example demonstrates using the Repository pattern for DDD-style code organization,
with a pydantic model as the aggregate.
"""

from row_persist import Repository, Tag
from pydantic import BaseModel
from typing import Annotated
import sqlite3


class User(BaseModel):
    """User entity"""
    id: Annotated[int, Tag("id,pk")] = 0
    name: str
    email: str
    active: bool = True


class UserRepository(Repository[User]):
    """Repository for User entities"""

    def __init__(self, conn):
        super().__init__(conn, "users", User)

    def find_all_active(self) -> list[User]:
        """Find all active users"""
        return self.find("SELECT * FROM users WHERE active = 1 ORDER BY name")

    def find_by_email(self, email: str) -> User:
        return self.find_one("SELECT * FROM users WHERE email = ?", email)


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
    """)

    repo = UserRepository(conn)

    print("=== Repository Pattern ===\n")

    repo.add(User(name="Alice", email="alice@example.com"))
    repo.add(User(name="Bob", email="bob@example.com"))
    charlie = repo.add(User(name="Charlie", email="charlie@example.com"))

    charlie.active = False
    repo.save(charlie)

    print("Active users:")
    for user in repo.find_all_active():
        print(f"  - {user.name} ({user.email})")

    print(f"\nBy email: {repo.find_by_email('bob@example.com')}")

    conn.commit()
    conn.close()


if __name__ == "__main__":
    main()
