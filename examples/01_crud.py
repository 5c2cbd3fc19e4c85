"""
Example 01: Basic CRUD

This example demonstrates load, insert, update and save with row_persist's Database.
"""

from row_persist import Database, Tag, NoRowsError
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated
import sqlite3


@dataclass
class Person:
    id: Annotated[int, Tag("id,pk")] = 0
    name: str = ""
    email: str = ""
    age: Annotated[int, Tag("age,zeroisnull")] = 0
    created: Annotated[str, Tag("created")] = ""


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("""
        CREATE TABLE person (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            age INTEGER,
            created TEXT NOT NULL
        )
    """)

    db = Database()

    print("=== Basic CRUD ===\n")

    # insert: the generated integer key is written back
    alice = Person(name="Alice", email="alice@example.com", age=32, created=datetime.now().isoformat())
    db.insert(conn, "person", alice)
    print(f"Inserted Alice with id {alice.id}")

    # zero values flagged zeroisnull are stored as NULL
    bob = Person(name="Bob", email="bob@example.com", created=datetime.now().isoformat())
    db.insert(conn, "person", bob)
    print(f"Raw age for Bob: {conn.execute('SELECT age FROM person WHERE id = ?', (bob.id,)).fetchone()[0]}\n")

    # load by primary key
    loaded = Person()
    db.load(conn, "person", loaded, alice.id)
    print(f"Loaded: {loaded}")

    # update returns the affected row count
    loaded.age += 1
    print(f"Updated rows: {db.update(conn, 'person', loaded)}")

    # save routes to insert or update depending on the key
    carol = Person(name="Carol", email="carol@example.com", created=datetime.now().isoformat())
    db.save(conn, "person", carol)
    carol.email = "carol@example.org"
    db.save(conn, "person", carol)

    # query_all scans every row into new instances
    for person in db.query_all(conn, Person, "SELECT * FROM person ORDER BY id"):
        print(f"  - {person.id}: {person.name} ({person.email}) age={person.age}")

    try:
        db.load(conn, "person", Person(), 999)
    except NoRowsError as e:
        print(f"\nMissing row: {e}")

    conn.commit()
    conn.close()


if __name__ == "__main__":
    main()
