"""
Example 02: Value Coders

This example demonstrates json, gzip and pickle coders plus types that persist themselves.
"""

from row_persist import Database, Tag
from dataclasses import dataclass, field
from typing import Annotated
import sqlite3


class Money:
    """Stored as integer cents."""

    def __init__(self, cents):
        self.cents = cents

    def to_db(self):
        return self.cents

    @classmethod
    def from_db(cls, raw):
        return cls(int(raw))

    def __repr__(self):
        return f"Money({self.cents / 100:.2f})"


@dataclass
class Order:
    id: Annotated[int, Tag("id,pk")] = 0
    tags: Annotated[list[str], Tag("tags,json")] = field(default_factory=list)
    payload: Annotated[dict[str, int], Tag("payload,jsongzip")] = field(default_factory=dict)
    state: Annotated[dict[str, object], Tag("state,pickle")] = field(default_factory=dict)
    total: Money | None = None


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("""
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            tags TEXT,
            payload BLOB,
            state BLOB,
            total INTEGER
        )
    """)

    db = Database()

    print("=== Value Coders ===\n")

    order = Order(
        tags=["priority", "gift"],
        payload={"items": 3, "weight": 1200},
        state={"step": "packed", "attempts": (1, 2)},
        total=Money(4599),
    )
    db.insert(conn, "orders", order)

    raw = conn.execute("SELECT tags, length(payload), total FROM orders").fetchone()
    print(f"Stored tags: {raw[0]}")
    print(f"Stored payload size: {raw[1]} bytes")
    print(f"Stored total: {raw[2]}\n")

    loaded = Order()
    db.load(conn, "orders", loaded, order.id)
    print(f"Loaded: {loaded}")

    conn.close()


if __name__ == "__main__":
    main()
